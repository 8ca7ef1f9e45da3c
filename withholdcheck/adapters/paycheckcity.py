"""PaycheckCity salary calculator (source A).

Reports Medicare and Social Security as separate line items. Results are
read as every label/value pair in the result form; the normalizer decides
which labels matter.
"""

import logging
from typing import List

from playwright.sync_api import Error as PlaywrightError

from ..sdk.schemas import CalculationRequest
from .base import AcquisitionError, RawRow

logger = logging.getLogger(__name__)

URL = "https://www.paycheckcity.com/calculator/salary/"

SELECT_STATE_BUTTON = 'a.btn-text.underline[href="#select-state-calculator"]'
STATE_LINK = 'a[href="/calculator/salary/{slug}"]'
ADDRESS_INPUT = "#stateInfo\\.local\\.address1"
CITY_INPUT = "#stateInfo\\.local\\.city"
ZIP_INPUT = "#stateInfo\\.local\\.zip"
STATE_FILING_STATUS = "#stateInfo\\.parms\\.FILINGSTATUS"
GROSS_PAY_INPUT = "#grossPay"
PAY_FREQUENCY = "#payFrequency"
W4_2020_CHECKBOX = "#w42020"
FEDERAL_FILING_STATUS = "#federalFilingStatusType2020"
CALCULATE_BUTTON = 'button[type="submit"].btn.btn-primary'
NET_PAY_LABEL = "Take home pay (net pay)"

# Address fields only exist for states with local taxes
OPTIONAL_FIELD_TIMEOUT_MS = 2000
RESULT_TIMEOUT_MS = 60000

# PaycheckCity has no separate married-filing-separately option
FEDERAL_FILING_STATUS_VALUES = {
    "SINGLE": "SINGLE",
    "MARRIED": "MARRIED",
    "MARRIED_SEPARATELY": "SINGLE",
    "HEAD_OF_HOUSEHOLD": "HEAD_OF_HOUSEHOLD",
    "NONRESIDENT_ALIEN": "NONRESIDENT_ALIEN",
}

_READ_ROWS_JS = """
() => Array.from(document.querySelectorAll("div.form-group")).map((group) => {
    const label = group.querySelector(".form-label");
    const value = group.querySelector("div.form-control-plaintext");
    return label && value ? [label.textContent.trim(), value.textContent.trim()] : null;
}).filter(Boolean)
"""


def _is_visible(page, selector: str) -> bool:
    try:
        page.wait_for_selector(selector, state="visible", timeout=OPTIONAL_FIELD_TIMEOUT_MS)
        return True
    except PlaywrightError:
        return False


class PaycheckCityAdapter:
    """Drives the PaycheckCity salary calculator."""

    name = "paycheckcity"

    def fetch(self, session, request: CalculationRequest) -> List[RawRow]:
        page = session.new_page()
        try:
            return self._run(page, request)
        except PlaywrightError as e:
            raise AcquisitionError(self.name, str(e).splitlines()[0] if str(e) else repr(e))

    def _run(self, page, request: CalculationRequest) -> List[RawRow]:
        logger.info(f"{self.name}: loading calculator")
        page.goto(URL, wait_until="networkidle")

        page.click(SELECT_STATE_BUTTON)
        page.click(STATE_LINK.format(slug=request.state_slug))
        logger.debug(f"{self.name}: selected state {request.state_slug}")

        if all(_is_visible(page, s) for s in (ADDRESS_INPUT, CITY_INPUT, ZIP_INPUT)):
            page.fill(ADDRESS_INPUT, request.address)
            page.fill(CITY_INPUT, request.city)
            page.fill(ZIP_INPUT, request.zipcode)
            if _is_visible(page, STATE_FILING_STATUS):
                page.select_option(STATE_FILING_STATUS, request.filing_status.state_code)
        else:
            logger.debug(f"{self.name}: no local address fields for {request.state}")

        page.fill(GROSS_PAY_INPUT, f"{request.salary:.2f}")
        page.select_option(PAY_FREQUENCY, "ANNUAL")
        if not page.is_checked(W4_2020_CHECKBOX):
            page.check(W4_2020_CHECKBOX)
        page.select_option(
            FEDERAL_FILING_STATUS,
            FEDERAL_FILING_STATUS_VALUES[request.filing_status.value],
        )

        page.click(CALCULATE_BUTTON)
        page.get_by_text(NET_PAY_LABEL, exact=True).first.wait_for(timeout=RESULT_TIMEOUT_MS)

        rows = [(label, value) for label, value in page.evaluate(_READ_ROWS_JS)]
        logger.info(f"{self.name}: read {len(rows)} result rows")
        if not rows:
            raise AcquisitionError(self.name, "result page had no label/value rows")
        return rows
