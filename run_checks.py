from fastapi.testclient import TestClient
from lokisa.main import app

client = TestClient(app)

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nMUNICIPALITY (Pretoria Central):')
print(client.get('/api/municipalities/lookup', params={'lat': -25.7479, 'lng': 28.2293}).json())

print('\nROUTING (outside all municipalities):')
print(client.get('/api/municipalities/routing', params={'lat': -24.0, 'lng': 29.0, 'category': 'pothole'}).json())

print('\nDB HEALTH:')
try:
    resp = client.get('/health/db')
    print(resp.status_code)
    try:
        print(resp.json())
    except Exception:
        print(resp.text)
except Exception as e:
    print('DB call raised exception:', e)
