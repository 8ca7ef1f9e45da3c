"""Unit tests for source adapters and the browser session.

Pages are MagicMocks; only the adapter's own control flow is exercised.
"""

from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from withholdcheck.adapters import (
    PaycheckCityAdapter,
    SmartAssetAdapter,
    default_adapters,
    get_adapter,
)
from withholdcheck.adapters import browser
from withholdcheck.adapters.browser import BrowserSession
from withholdcheck.sdk.errors import AcquisitionError
from withholdcheck.sdk.schemas import CalculationRequest


@pytest.fixture
def request_params():
    return CalculationRequest(
        salary=65000,
        withholding=5000,
        state="New York",
        address="35 Hudson Yards",
        city="New York",
        zipcode="10001",
        filingStatus="MARRIED",
    )


def session_with(page):
    session = MagicMock()
    session.new_page.return_value = page
    return session


class TestRegistry:
    """Tests for adapter lookup."""

    def test_default_order(self):
        a, b = default_adapters()
        assert (a.name, b.name) == ("paycheckcity", "smartasset")

    def test_get_adapter(self):
        assert isinstance(get_adapter("smartasset"), SmartAssetAdapter)

    def test_unknown_adapter(self):
        with pytest.raises(ValueError, match="Unknown source"):
            get_adapter("nope")


class TestPaycheckCity:
    """Tests for PaycheckCityAdapter."""

    def test_returns_page_rows(self, request_params):
        page = MagicMock()
        page.evaluate.return_value = [
            ["Federal Withholding", "$9,000.00"],
            ["Medicare", "$942.50"],
        ]

        rows = PaycheckCityAdapter().fetch(session_with(page), request_params)

        assert rows == [("Federal Withholding", "$9,000.00"), ("Medicare", "$942.50")]
        page.fill.assert_any_call("#grossPay", "65000.00")
        page.select_option.assert_any_call("#stateInfo\\.parms\\.FILINGSTATUS", "M")

    def test_no_rows_is_acquisition_error(self, request_params):
        page = MagicMock()
        page.evaluate.return_value = []

        with pytest.raises(AcquisitionError) as exc_info:
            PaycheckCityAdapter().fetch(session_with(page), request_params)

        assert exc_info.value.source == "paycheckcity"

    def test_playwright_error_wrapped(self, request_params):
        page = MagicMock()
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED\nCall log: ...")

        with pytest.raises(AcquisitionError) as exc_info:
            PaycheckCityAdapter().fetch(session_with(page), request_params)

        assert exc_info.value.message == "net::ERR_NAME_NOT_RESOLVED"


class TestSmartAsset:
    """Tests for SmartAssetAdapter."""

    def test_salary_reduced_by_withholding(self, request_params):
        page = MagicMock()

        SmartAssetAdapter().fetch(session_with(page), request_params)

        salary_calls = [c for c in page.evaluate.call_args_list if len(c.args) == 2]
        assert salary_calls[0].args[1] == "60000.00"

    def test_reads_present_spans(self, request_params):
        page = MagicMock()
        element = MagicMock()
        element.text_content.return_value = " $4,972.50 "

        def query_selector(selector):
            return element if selector == "span.fica-amount-next" else None

        page.query_selector.side_effect = query_selector

        rows = SmartAssetAdapter().fetch(session_with(page), request_params)

        assert rows == [("FICA", "$4,972.50")]

    def test_playwright_error_wrapped(self, request_params):
        page = MagicMock()
        page.wait_for_selector.side_effect = PlaywrightError("Timeout 30000ms exceeded.")

        with pytest.raises(AcquisitionError, match="smartasset: Timeout"):
            SmartAssetAdapter().fetch(session_with(page), request_params)


class TestBrowserSession:
    """Tests for BrowserSession lifecycle."""

    def test_new_page_requires_open_session(self):
        with pytest.raises(RuntimeError):
            BrowserSession().new_page()

    def test_close_is_idempotent(self):
        session = BrowserSession()
        session.close()
        session.close()

    def test_closed_after_block(self, monkeypatch):
        driver = MagicMock()
        monkeypatch.setattr(browser, "sync_playwright", lambda: MagicMock(start=lambda: driver))

        with BrowserSession(headless=True, timeout_ms=1000) as session:
            page = session.new_page()

        page.close.assert_called_once()
        driver.chromium.launch.assert_called_once_with(headless=True)
        driver.stop.assert_called_once()

    def test_remote_endpoint(self, monkeypatch):
        driver = MagicMock()
        monkeypatch.setattr(browser, "sync_playwright", lambda: MagicMock(start=lambda: driver))

        with BrowserSession(ws_endpoint="ws://remote:9222"):
            pass

        driver.chromium.connect_over_cdp.assert_called_once_with("ws://remote:9222")
        driver.chromium.launch.assert_not_called()

    def test_launch_failure_is_acquisition_error(self, monkeypatch):
        driver = MagicMock()
        driver.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")
        monkeypatch.setattr(browser, "sync_playwright", lambda: MagicMock(start=lambda: driver))

        with pytest.raises(AcquisitionError, match="browser"):
            with BrowserSession():
                pass

        driver.stop.assert_called_once()
