# smoke_check.py
# Manual end-to-end run against a live service (and the backend mock):
#   uvicorn sage_insights.tests.backend_mock:app --port 3000
#   uvicorn sage_insights.main:app --port 8000
#   python smoke_check.py
import json
import os

import requests
from dotenv import load_dotenv

load_dotenv()

BASE_URL = os.getenv("INSIGHTS_BASE_URL", "http://127.0.0.1:8000")
USER = {"_id": "user_01", "name": "Operator"}

session = requests.Session()

# Step 1: Open a session
print("=" * 60)
print("STEP 1: Logging in...")
print("=" * 60)

r = session.post(f"{BASE_URL}/login", data={"user_id": USER["_id"], "name": USER["name"]},
                 allow_redirects=False, timeout=10)
print(f"STATUS: {r.status_code} -> {r.headers.get('location')}")

# Step 2: List labs
print("\n" + "=" * 60)
print("STEP 2: Fetching labs...")
print("=" * 60)

r = session.get(f"{BASE_URL}/api/v1/insights/labs", timeout=10)
print(f"STATUS: {r.status_code}")
labs = r.json() if r.ok else []
print(f"BODY JSON: {json.dumps(labs, indent=2)}")

# Step 3: Stats per lab
print("\n" + "=" * 60)
print("STEP 3: Fetching maintenance stats per lab...")
print("=" * 60)

for lab in labs:
    url = f"{BASE_URL}/api/v1/insights/labs/{lab['_id']}/stats"
    print(f"\nSENDING to {url}")
    r = session.get(url, timeout=30)
    print(f"STATUS: {r.status_code}")
    try:
        print(f"BODY JSON: {json.dumps(r.json(), indent=2)}")
    except ValueError:
        print(f"BODY TEXT: {r.text}")

# Step 4: Dashboard page
print("\n" + "=" * 60)
print("STEP 4: Rendering dashboard page...")
print("=" * 60)

r = session.get(f"{BASE_URL}/ai-insights", timeout=30)
print(f"STATUS: {r.status_code}, {len(r.text)} bytes")
