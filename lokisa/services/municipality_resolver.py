"""
Municipality Resolver - map a coordinate to its governing municipality and
an issue category to the department inboxes that should hear about it.

DESIGN PRINCIPLES:
- The registry is an ordered rule list: first match wins
- "No municipality" is a normal answer, never an error
- Routing always yields at least one recipient
"""

from typing import List, Optional, Sequence
import logging

from lokisa.config.municipalities import MUNICIPALITIES
from lokisa.core.errors import ConfigurationError
from lokisa.core.settings import settings
from lokisa.models.geo import Coordinate, Municipality, MunicipalityInfo, MunicipalitySummary
from lokisa.services.boundary import contains

logger = logging.getLogger(__name__)

UNKNOWN_MUNICIPALITY = MunicipalityInfo(name="Unknown Municipality", code="unknown", found=False)


def _unique(emails: Sequence[str]) -> List[str]:
    seen = set()
    ordered = []
    for email in emails:
        if email and email not in seen:
            seen.add(email)
            ordered.append(email)
    return ordered


class MunicipalityResolver:
    """Read-only lookup over a registration-ordered municipality registry."""

    def __init__(
        self,
        municipalities: Sequence[Municipality],
        oversight_email: Optional[str],
        fallback_email: Optional[str],
    ):
        codes = [m.code for m in municipalities]
        if len(codes) != len(set(codes)):
            raise ConfigurationError(f"Duplicate municipality codes in registry: {codes}")
        if not oversight_email and not fallback_email:
            raise ConfigurationError("Either an oversight or a fallback email address must be configured")

        self._municipalities = tuple(municipalities)
        self.oversight_email = oversight_email
        self.fallback_email = fallback_email

    @property
    def municipalities(self) -> Sequence[Municipality]:
        return self._municipalities

    def resolve(self, point: Coordinate) -> Optional[Municipality]:
        """Return the first registered municipality with a boundary containing point."""
        for municipality in self._municipalities:
            if any(contains(boundary, point) for boundary in municipality.boundaries):
                return municipality
        return None

    def department_emails(self, point: Coordinate, issue_category: str) -> List[str]:
        """
        Recipients for an issue of issue_category at point.

        Resolution order inside a municipality: the category's own routing,
        then the fallback category, then customercare at the municipality's
        default domain. The oversight address is always included first.
        """
        base = [self.oversight_email] if self.oversight_email else []

        municipality = self.resolve(point)
        if municipality is None:
            logger.warning(
                f"Location {point.latitude}, {point.longitude} not found in any municipality, "
                f"using fallback {self.fallback_email}"
            )
            return _unique(base + [self.fallback_email])

        routing = municipality.department_routing
        departments = (
            routing.get(issue_category)
            or routing.get(municipality.fallback_category)
            or [f"customercare{municipality.default_email_domain}"]
        )
        return _unique(base + list(departments))

    def info(self, point: Coordinate) -> MunicipalityInfo:
        municipality = self.resolve(point)
        if municipality is None:
            return UNKNOWN_MUNICIPALITY
        return MunicipalityInfo(name=municipality.name, code=municipality.code, found=True)

    def all(self) -> List[MunicipalitySummary]:
        return [MunicipalitySummary(name=m.name, code=m.code) for m in self._municipalities]


# Global resolver instance
_resolver = None


def get_municipality_resolver() -> MunicipalityResolver:
    """Get or create the MunicipalityResolver singleton."""
    global _resolver
    if _resolver is None:
        _resolver = MunicipalityResolver(
            MUNICIPALITIES,
            oversight_email=settings.OVERSIGHT_EMAIL,
            fallback_email=settings.FALLBACK_DEPARTMENT_EMAIL,
        )
    return _resolver
