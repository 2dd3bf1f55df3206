import httpx
import asyncio
import os
import uuid

BASE_URL = os.getenv("VERIFY_BASE_URL", "http://localhost:8000")

async def run_verification():
    print(f"🚀  Starting Verification against {BASE_URL}...\n")

    async with httpx.AsyncClient(base_url=BASE_URL, timeout=10.0) as client:
        # 1. Health Check
        print("1. [Health] Checking /health...")
        try:
            resp = await client.get("/health")
            if resp.status_code == 200 and resp.json() == {"status": "ok"}:
                print("   ✅  Health Check Passed")
            else:
                print(f"   ❌  Health Check Failed: {resp.text}")
                return
        except httpx.HTTPError as e:
            print(f"   ❌  Connection Error: {e}")
            return

        # 2. Register + Login
        print("\n2. [Auth] Registering and logging in...")
        run_id = uuid.uuid4().hex[:8]
        email = f"verify-{run_id}@example.com"
        password = "verify-password"
        resp = await client.post("/v1/auth/register", json={"name": "Verifier", "email": email, "password": password})
        if resp.status_code != 201:
            print(f"   ❌  Register Failed: {resp.status_code} {resp.text}")
            return

        resp = await client.post("/v1/auth/login", json={"email": email, "password": password})
        if resp.status_code != 200:
            print(f"   ❌  Login Failed: {resp.status_code} {resp.text}")
            return
        headers = {"Authorization": f"Bearer {resp.json()['token']}"}
        print("   ✅  Logged in")

        # 3. Create Link
        print("\n3. [API] Creating Short Link...")
        long_url = f"https://www.example.com/verify/{run_id}"
        resp = await client.post("/v1/urls", json={"original_url": long_url}, headers=headers)
        if resp.status_code == 201:
            data = resp.json()
            print(f"   ✅  Created: {data['short_url']}")
        else:
            print(f"   ❌  Create Failed: {resp.status_code} {resp.text}")
            return
        link_id = data["id"]
        short_code = data["short_code"]

        resp = await client.post("/v1/urls", json={"original_url": long_url}, headers=headers)
        if resp.status_code == 409:
            print("   ✅  Duplicate URL rejected with 409")
        else:
            print(f"   ❌  Duplicate URL not rejected: {resp.status_code}")

        # 4. Verify Redirect
        print("\n4. [API] Verifying Redirect...")
        resp = await client.get(f"/r/{short_code}", follow_redirects=False)
        if resp.status_code == 302 and resp.headers.get("location") == long_url:
            print(f"   ✅  Redirect Location matches: {resp.headers['location']}")
        else:
            print(f"   ❌  Redirect Failed: {resp.status_code} {resp.headers.get('location')}")

        # 5. Verify Details
        print("\n5. [API] Verifying Details...")
        resp = await client.get(f"/v1/urls/{link_id}", headers=headers)
        if resp.status_code == 200:
            data = resp.json()
            if data["visit_count"] > 0:
                print(f"   ✅  Visit Count updated: {data['visit_count']}")
            else:
                print(f"   ❌  Visit Count not updated: {data['visit_count']}")
        else:
            print(f"   ❌  Details Failed: {resp.status_code}")

        # 6. Delete
        print("\n6. [API] Deleting Link...")
        resp = await client.delete(f"/v1/urls/{link_id}", headers=headers)
        if resp.status_code == 204:
            print("   ✅  Deleted")
        else:
            print(f"   ❌  Delete Failed: {resp.status_code}")

        # 7. Metrics
        print("\n7. [Observability] Verifying Metrics...")
        resp = await client.get("/metrics")
        if resp.status_code == 200 and "short_links_created_total" in resp.text:
            print("   ✅  Metrics Endpoint Exposed")
        else:
            print(f"   ❌  Metrics Failed: {resp.status_code}")

    print("\n✨ Verification Complete!")

if __name__ == "__main__":
    asyncio.run(run_verification())
