"""
API Performance Testing Script
Exercises the sweet shop endpoints against a running server

This script:
1. Logs in a user
2. Times the read endpoints with a range of filters
3. Runs a purchase (and, for admins, a restock) round trip
4. Generates a performance report
"""

import requests
import time
import json
from typing import Dict, Optional
from datetime import datetime
import os
import sys

# Configuration
BASE_URL = os.getenv("SWEETSHOP_API_URL", "http://127.0.0.1:8000/api")

EMAIL = os.getenv("SWEETSHOP_EMAIL", "")
PASSWORD = os.getenv("SWEETSHOP_PASSWORD", "")


class APITester:
    """Class to handle API testing and performance measurement"""

    def __init__(self, base_url: str):
        self.base_url = base_url
        self.results = []
        self.session = requests.Session()
        self.user = None

    def authenticate(self, email: str, password: str) -> bool:
        """Authenticate and store the bearer token on the session"""
        try:
            print(f"🔐 Authenticating as {email}...")
            response = self.session.post(
                f"{self.base_url}/auth/login",
                json={"email": email, "password": password},
                timeout=10
            )
        except requests.RequestException as e:
            print(f"❌ Authentication error: {str(e)}")
            return False

        if response.status_code != 200:
            print(f"❌ Authentication failed: {response.status_code}")
            print(f"Response: {response.text}")
            return False

        data = response.json()
        self.user = data.get('user')
        self.session.headers.update({
            'Authorization': f"Bearer {data.get('access')}",
            'Content-Type': 'application/json'
        })
        print("✅ Authentication successful!")
        return True

    def test_endpoint(
        self,
        name: str,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict] = None,
        payload: Optional[Dict] = None,
        expected_status: int = 200,
    ) -> Dict:
        """Call a single API endpoint and measure response time"""
        url = f"{self.base_url}{endpoint}"
        result = {
            'name': name,
            'method': method,
            'endpoint': endpoint,
            'params': params or {},
            'timestamp': datetime.now().isoformat(),
        }

        try:
            start_time = time.perf_counter()
            response = self.session.request(method, url, params=params, json=payload, timeout=30)
            elapsed = (time.perf_counter() - start_time) * 1000
        except requests.exceptions.Timeout:
            result.update(status_code=0, response_time_ms=30000, success=False, error='Request timeout (30s)')
            self.results.append(result)
            return result
        except requests.RequestException as e:
            result.update(status_code=0, response_time_ms=0, success=False, error=str(e))
            self.results.append(result)
            return result

        result.update(
            status_code=response.status_code,
            response_time_ms=round(elapsed, 2),
            success=response.status_code == expected_status,
            cache=response.headers.get('X-Cache'),
        )
        try:
            data = response.json()
        except ValueError:
            data = None
        result['data'] = data
        if isinstance(data, list):
            result['item_count'] = len(data)
        if not result['success']:
            result['error'] = response.text[:500]

        self.results.append(result)
        return result

    def print_result(self, result: Dict):
        """Print a single test result"""
        status_icon = "✅" if result['success'] else "❌"
        print(f"{status_icon} {result['name']}")
        print(f"   {result['method']} {result['endpoint']} -> {result['status_code']} in {result['response_time_ms']}ms")
        if result.get('cache'):
            print(f"   Cache: {result['cache']}")
        if result.get('item_count') is not None:
            print(f"   Items: {result['item_count']}")
        if not result['success'] and result.get('error'):
            print(f"   Error: {result['error'][:200]}")
        print()

    def generate_report(self):
        """Generate a summary report of all tests"""
        total_tests = len(self.results)
        successful = [r for r in self.results if r['success']]
        failed_tests = total_tests - len(successful)
        avg_response_time = sum(r['response_time_ms'] for r in successful) / len(successful) if successful else 0

        print("\n" + "=" * 80)
        print("📊 API PERFORMANCE TEST REPORT")
        print("=" * 80)
        print(f"Base URL: {self.base_url}")
        print(f"Test Date: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"\nTotal Tests: {total_tests}")
        print(f"Successful: {len(successful)} ✅")
        print(f"Failed: {failed_tests} ❌")
        print(f"\nAverage Response Time: {avg_response_time:.2f}ms")
        if successful:
            slowest = max(successful, key=lambda r: r['response_time_ms'])
            print(f"Slowest: {slowest['name']} ({slowest['response_time_ms']}ms)")
        print("=" * 80)

    def save_results(self, filename: str = "api_test_results.json"):
        """Save results to a JSON file"""
        with open(filename, 'w') as f:
            json.dump({
                'test_date': datetime.now().isoformat(),
                'base_url': self.base_url,
                'total_tests': len(self.results),
                'successful_tests': sum(1 for r in self.results if r['success']),
                'results': [{k: v for k, v in r.items() if k != 'data'} for r in self.results],
            }, f, indent=2)
        print(f"\n💾 Results saved to {filename}")


def main():
    """Main function to run all API tests"""
    print("=" * 80)
    print("🧪 SWEET SHOP API PERFORMANCE TESTING TOOL")
    print("=" * 80)
    print(f"Target: {BASE_URL}\n")

    email = EMAIL or input("Enter email: ")
    password = PASSWORD
    if not password:
        import getpass
        password = getpass.getpass("Enter password: ")

    tester = APITester(BASE_URL)
    if not tester.authenticate(email, password):
        print("❌ Authentication failed. Cannot proceed with tests.")
        sys.exit(1)

    print("\n🍬 Testing Sweets APIs...\n")
    listing = tester.test_endpoint("Sweets - List (cold)", "/sweets")
    tester.print_result(listing)
    tester.print_result(tester.test_endpoint("Sweets - List (warm)", "/sweets"))

    for params in ({"name": "choc"}, {"category": "candy"}, {"min_price": "1", "max_price": "10"}, {"in_stock": "true"}):
        tester.print_result(tester.test_endpoint(f"Sweets - Search {params}", "/sweets/search", params=params))

    sweets = listing.get('data') or []
    in_stock = next((s for s in sweets if s.get('quantity', 0) > 0), None)
    if in_stock:
        sweet_id = in_stock['id']
        tester.print_result(tester.test_endpoint("Sweets - Get by ID", f"/sweets/{sweet_id}"))
        tester.print_result(tester.test_endpoint(
            "Stock - Purchase 1", f"/sweets/{sweet_id}/purchase", method="POST", payload={"quantity": 1}))
        tester.print_result(tester.test_endpoint(
            "Stock - Purchase too many", f"/sweets/{sweet_id}/purchase", method="POST",
            payload={"quantity": in_stock['quantity'] + 1000}, expected_status=400))
        if tester.user and tester.user.get('is_admin'):
            tester.print_result(tester.test_endpoint(
                "Stock - Restock 1", f"/sweets/{sweet_id}/restock", method="POST", payload={"quantity": 1}))
    else:
        print("⚠️  No sweet in stock; skipping purchase/restock round trip\n")

    tester.print_result(tester.test_endpoint("Auth - Me", "/auth/me"))

    tester.generate_report()
    tester.save_results()


if __name__ == "__main__":
    main()
