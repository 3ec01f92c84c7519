#!/usr/bin/env python3
"""
Validation script for the shortlink service.
Tests the live running service to ensure all functionality works correctly.
"""

import argparse
import os
import sys
import time
import requests
from typing import Optional
from datetime import datetime


class ServiceValidator:
    """Validates shortlink service functionality."""

    def __init__(self, base_url: str = "http://localhost:5000", admin_key: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.admin_key = admin_key
        self.session = requests.Session()
        self.test_results = []

    def print_header(self, text: str):
        """Print a formatted header."""
        print(f"\n{'='*60}")
        print(f"  {text}")
        print(f"{'='*60}\n")

    def print_test(self, name: str, passed: bool, details: str = ""):
        """Print test result."""
        status = "✅ PASS" if passed else "❌ FAIL"
        self.test_results.append((name, passed))
        print(f"{status} - {name}")
        if details:
            print(f"       {details}")

    def test_health_check(self) -> bool:
        """Test health check endpoint."""
        try:
            response = self.session.get(f"{self.base_url}/api/health", timeout=5)
            if response.status_code == 200:
                data = response.json()
                is_healthy = data.get("success") is True and data.get("database") == "healthy"
                self.print_test("Health Check", is_healthy, f"DB: {data.get('database')}")
                return is_healthy
            self.print_test("Health Check", False, f"Status: {response.status_code}")
            return False
        except requests.RequestException as e:
            self.print_test("Health Check", False, f"Error: {str(e)}")
            return False

    def test_create_short_url(self, original_url: str) -> Optional[str]:
        """Test creating a short URL."""
        try:
            response = self.session.post(
                f"{self.base_url}/api/shorten",
                json={"originalUrl": original_url},
                timeout=5
            )

            if response.status_code == 201:
                data = response.json().get("data", {})
                short_code = data.get("shortCode")
                if short_code:
                    self.print_test(
                        "Create Short URL",
                        True,
                        f"Code: {short_code}, URL: {data.get('shortUrl')}"
                    )
                    return short_code

            self.print_test("Create Short URL", False, f"Status: {response.status_code}")
            return None
        except requests.RequestException as e:
            self.print_test("Create Short URL", False, f"Error: {str(e)}")
            return None

    def test_resubmit_returns_existing(self, original_url: str, short_code: str) -> bool:
        """Test that shortening the same URL again reuses the code."""
        try:
            response = self.session.post(
                f"{self.base_url}/api/shorten",
                json={"originalUrl": original_url},
                timeout=5
            )
            same = (
                response.status_code == 200
                and response.json().get("data", {}).get("shortCode") == short_code
            )
            self.print_test("Resubmit Returns Existing", same, f"Status: {response.status_code} (expected 200)")
            return same
        except requests.RequestException as e:
            self.print_test("Resubmit Returns Existing", False, f"Error: {str(e)}")
            return False

    def test_redirect(self, short_code: str, original_url: str) -> bool:
        """Test URL redirect functionality."""
        try:
            response = self.session.get(
                f"{self.base_url}/{short_code}",
                allow_redirects=False,
                timeout=5
            )

            location = response.headers.get("Location", "")
            is_redirect = response.status_code == 301 and location == original_url
            self.print_test(
                "URL Redirect",
                is_redirect,
                f"Status: {response.status_code}, redirects to: {location[:50]}" if location else "No Location header"
            )
            return is_redirect
        except requests.RequestException as e:
            self.print_test("URL Redirect", False, f"Error: {str(e)}")
            return False

    def test_analytics(self, short_code: str, expected_clicks: int) -> bool:
        """Test click analytics after redirects."""
        try:
            response = self.session.get(f"{self.base_url}/api/analytics/{short_code}", timeout=5)

            if response.status_code == 200:
                data = response.json().get("data", {})
                clicks = data.get("clicks")
                ok = clicks == expected_clicks and data.get("lastAccessed") is not None
                self.print_test("Click Analytics", ok, f"Clicks: {clicks} (expected {expected_clicks})")
                return ok
            self.print_test("Click Analytics", False, f"Status: {response.status_code}")
            return False
        except requests.RequestException as e:
            self.print_test("Click Analytics", False, f"Error: {str(e)}")
            return False

    def test_invalid_url(self) -> bool:
        """Test invalid URL rejection."""
        try:
            response = self.session.post(
                f"{self.base_url}/api/shorten",
                json={"originalUrl": "not-a-valid-url"},
                timeout=5
            )

            is_rejected = response.status_code == 400 and response.json().get("success") is False
            self.print_test(
                "Invalid URL Rejection",
                is_rejected,
                f"Status: {response.status_code} (expected 400)"
            )
            return is_rejected
        except requests.RequestException as e:
            self.print_test("Invalid URL Rejection", False, f"Error: {str(e)}")
            return False

    def test_nonexistent_code(self) -> bool:
        """Test accessing non-existent short code."""
        try:
            response = self.session.get(
                f"{self.base_url}/nonexistent999",
                allow_redirects=False,
                timeout=5
            )

            is_not_found = response.status_code == 404
            self.print_test(
                "Non-existent Code",
                is_not_found,
                f"Status: {response.status_code} (expected 404)"
            )
            return is_not_found
        except requests.RequestException as e:
            self.print_test("Non-existent Code", False, f"Error: {str(e)}")
            return False

    def test_admin_requires_key(self) -> bool:
        """Test that admin endpoints reject requests without the key."""
        try:
            response = self.session.get(f"{self.base_url}/api/admin/stats", timeout=5)

            is_rejected = response.status_code == 401
            self.print_test(
                "Admin Key Required",
                is_rejected,
                f"Status: {response.status_code} (expected 401)"
            )
            return is_rejected
        except requests.RequestException as e:
            self.print_test("Admin Key Required", False, f"Error: {str(e)}")
            return False

    def test_admin_stats(self) -> bool:
        """Test admin stats endpoint."""
        try:
            response = self.session.get(
                f"{self.base_url}/api/admin/stats",
                headers={"X-Admin-Key": self.admin_key},
                timeout=5
            )

            if response.status_code == 200:
                data = response.json().get("data", {})
                has_stats = all(key in data for key in ["totalUrls", "totalClicks", "urlsToday"])
                self.print_test("Admin Stats", has_stats, f"Total URLs: {data.get('totalUrls', 'N/A')}")
                return has_stats
            self.print_test("Admin Stats", False, f"Status: {response.status_code}")
            return False
        except requests.RequestException as e:
            self.print_test("Admin Stats", False, f"Error: {str(e)}")
            return False

    def run_all_tests(self) -> bool:
        """Run all validation tests."""
        self.print_header("Shortlink Service Validation")
        print(f"Testing service at: {self.base_url}")
        print(f"Timestamp: {datetime.now().isoformat()}\n")

        # Basic connectivity
        if not self.test_health_check():
            print("\n❌ Health check failed. Service may not be running.")
            print(f"   Make sure the service is accessible at {self.base_url}")
            return False

        print()

        # Core functionality tests
        original_url = f"https://example.com/validate/{int(time.time())}"
        short_code = self.test_create_short_url(original_url)
        if short_code:
            self.test_resubmit_returns_existing(original_url, short_code)
            self.test_redirect(short_code, original_url)
            self.test_analytics(short_code, expected_clicks=1)

        print()

        self.test_invalid_url()
        self.test_nonexistent_code()

        print()

        # Admin endpoints
        self.test_admin_requires_key()
        if self.admin_key:
            self.test_admin_stats()
        else:
            print("Skipping admin stats (no --admin-key given)")

        self.print_summary()

        return all(passed for _, passed in self.test_results)

    def print_summary(self):
        """Print test summary."""
        total = len(self.test_results)
        passed = sum(1 for _, p in self.test_results if p)
        failed = total - passed

        self.print_header("Test Summary")
        print(f"Total Tests:  {total}")
        print(f"✅ Passed:     {passed}")
        print(f"❌ Failed:     {failed}")
        print(f"Success Rate: {(passed/total*100):.1f}%")

        if failed > 0:
            print("\n⚠️  Failed tests:")
            for name, passed in self.test_results:
                if not passed:
                    print(f"   - {name}")

        print()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Validate shortlink service functionality"
    )
    parser.add_argument(
        "--url",
        default="http://localhost:5000",
        help="Base URL of the service (default: http://localhost:5000)"
    )
    parser.add_argument(
        "--admin-key",
        default=os.getenv("ADMIN_KEY"),
        help="Admin key for admin endpoint checks (default: from ADMIN_KEY env)"
    )

    args = parser.parse_args()

    validator = ServiceValidator(args.url, admin_key=args.admin_key)

    try:
        success = validator.run_all_tests()
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\n⚠️  Validation interrupted by user")
        sys.exit(2)


if __name__ == "__main__":
    main()
