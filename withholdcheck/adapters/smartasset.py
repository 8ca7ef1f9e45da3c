"""SmartAsset income tax calculator (source B).

Reports a single FICA figure. Each result span is emitted under a fixed
label so the normalizer can treat this source like any other.
"""

import logging
from typing import List

from playwright.sync_api import Error as PlaywrightError

from ..sdk.schemas import CalculationRequest
from .base import AcquisitionError, RawRow

logger = logging.getLogger(__name__)

URL = "https://smartasset.com/taxes/income-taxes"

FILING_STATUS_DROPDOWN = 'span[id^="select2-chosen-"]'
FILING_STATUS_OPTIONS = "ul.select2-results li"
LOCATION_INPUT = 'input[name="ud-current-location-display"]'
SALARY_INPUT = "input.dollar"
RESULT_READY = "span.income-after-taxes-next"

# Displayed label -> result span
RESULT_SPANS = {
    "Federal Withholding": "span.federal-amount-next",
    "State Tax Withholding": "span.state-amount-next",
    "City Tax": "span.local-amount-next",
    "FICA": "span.fica-amount-next",
    "Net Pay": "span.income-after-taxes-next",
}

FILING_STATUS_OPTIONS_TEXT = {
    "SINGLE": "Single",
    "MARRIED": "Married",
    "MARRIED_SEPARATELY": "Married Separately",
    "HEAD_OF_HOUSEHOLD": "Head of Household",
    "NONRESIDENT_ALIEN": "Single",
}

# Sets the React-controlled salary input so the page sees the change
_SET_SALARY_JS = """
(salary) => {
    const input = document.querySelector("input.dollar");
    const setter = Object.getOwnPropertyDescriptor(window.HTMLInputElement.prototype, "value").set;
    setter.call(input, salary);
    ["input", "change", "blur"].forEach((name) =>
        input.dispatchEvent(new Event(name, { bubbles: true })));
}
"""


class SmartAssetAdapter:
    """Drives the SmartAsset income tax calculator."""

    name = "smartasset"

    def fetch(self, session, request: CalculationRequest) -> List[RawRow]:
        page = session.new_page()
        try:
            return self._run(page, request)
        except PlaywrightError as e:
            raise AcquisitionError(self.name, str(e).splitlines()[0] if str(e) else repr(e))

    def _run(self, page, request: CalculationRequest) -> List[RawRow]:
        # This calculator has no additional-withholding input; it is taken off the salary
        adjusted_salary = request.salary - request.withholding

        logger.info(f"{self.name}: loading calculator")
        page.goto(URL, wait_until="networkidle")

        page.click(FILING_STATUS_DROPDOWN)
        option_text = FILING_STATUS_OPTIONS_TEXT[request.filing_status.value]
        page.locator(FILING_STATUS_OPTIONS).filter(has_text=option_text).first.click()

        page.fill(LOCATION_INPUT, "")
        page.type(LOCATION_INPUT, request.zipcode, delay=100)
        page.keyboard.press("ArrowDown")
        page.keyboard.press("Enter")

        page.wait_for_selector(SALARY_INPUT, state="visible")
        page.evaluate(_SET_SALARY_JS, f"{adjusted_salary:.2f}")
        page.wait_for_timeout(500)
        page.keyboard.press("Enter")

        page.wait_for_selector(RESULT_READY, state="visible")

        rows = []
        for label, selector in RESULT_SPANS.items():
            element = page.query_selector(selector)
            if element is None:
                logger.debug(f"{self.name}: no element for '{label}'")
                continue
            rows.append((label, element.text_content().strip()))

        logger.info(f"{self.name}: read {len(rows)} result rows")
        return rows
