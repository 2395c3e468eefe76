"""Test units for a simulated web shop.

The shop backend is an in-memory stand-in so the sample suite runs
without a browser.  Units run in dependency order and share the
module-level shop state, the way browser tests share a session.
"""

from __future__ import annotations

import asyncio

from suite_runner import TestUnit, UnitResult


class FakeShop:
    def __init__(self) -> None:
        self.accounts: dict[str, str] = {}
        self.session: str | None = None
        self.cart: list[dict] = []
        self.orders: list[dict] = []

    def register(self, email: str, password: str) -> bool:
        if email in self.accounts:
            return False
        self.accounts[email] = password
        return True

    def login(self, email: str, password: str) -> bool:
        if self.accounts.get(email) == password:
            self.session = email
            return True
        return False


SHOP = FakeShop()

# Credentials are generated per test run; keep the first registered
# account so later tests log in as the same user.
_ACCOUNT: dict[str, str] = {}


class RegistrationTest(TestUnit):
    def execute(self) -> None:
        credentials = self.data["user_credentials"]
        with self.step("register", email=credentials["email"]):
            created = SHOP.register(credentials["email"], credentials["password"])
            self.assert_that("account_created", created, critical=True)
        _ACCOUNT.update(credentials)


class LoginTest(TestUnit):
    async def run(self) -> UnitResult:
        # Simulates waiting on a page load
        await asyncio.sleep(0.01)
        if not _ACCOUNT:
            return UnitResult(False, "No registered account to log in with")
        if not SHOP.login(_ACCOUNT["email"], _ACCOUNT["password"]):
            return UnitResult(False, "Login rejected")
        return UnitResult(True)


class ProductSearchTest(TestUnit):
    def execute(self) -> None:
        products = self.data["products"]
        with self.step("search", query="mug"):
            matches = [p for p in products if "mug" in str(p["name"]).lower()]
            self.assert_that("results_found", bool(matches))


class CartTest(TestUnit):
    def execute(self) -> None:
        with self.step("add_to_cart"):
            self.assert_that("logged_in", SHOP.session is not None, critical=True)
            SHOP.cart.extend(self.data["products"][:2])
            self.assert_that("cart_has_items", len(SHOP.cart) == 2)
        with self.step("apply_discount"):
            discounts = self.data["discounts"]
            self.assert_that("discount_available", bool(discounts))


class CheckoutTest(TestUnit):
    def execute(self) -> None:
        address = self.data["addresses"][0]
        with self.step("place_order", city=address["city"]):
            self.assert_that("cart_not_empty", bool(SHOP.cart), critical=True)
            SHOP.orders.append({"items": list(SHOP.cart), "address": address})
            SHOP.cart.clear()
            self.assert_that("order_placed", len(SHOP.orders) == 1)
