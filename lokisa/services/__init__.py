"""
Services layer - Business logic goes here.
Keep services focused on specific domains (issues, supports, routing).

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Services raise lokisa.core.errors kinds; routes never build them
- Email is a side effect and never decides an operation's outcome
"""
