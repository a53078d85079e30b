import streamlit as st
import pandas as pd
from datetime import datetime

from ach_config import DELIMITERS, app_password, options_from_env
from ach_converter import assemble
from ach_errors import ConversionError
from ach_sheet import read_sheet
from logging_setup import configure_logging, get_logger

logger = get_logger("cpa005.app")

MODE_LABELS = {
    "PAD": "Debit file (PAP-PAD)",
    "PDS": "Credit file (PDS direct deposit)",
}
DELIMITER_LABELS = {
    "lf": "New line between records",
    "crlf": "CR/LF between records",
    "double": "Blank line between records",
    "none": "No separator (strict fixed width)",
}


# Authentication function
def check_password():
    """Returns True if the user may use the app.

    The app is open unless CPA005_APP_PASSWORD is configured.
    """
    correct_password = app_password()
    if not correct_password:
        return True

    def password_entered():
        """Checks whether a password entered by the user is correct."""
        if st.session_state["password"] == correct_password:
            st.session_state["password_correct"] = True
            del st.session_state["password"]  # Don't store password
        else:
            st.session_state["password_correct"] = False

    if st.session_state.get("password_correct"):
        return True

    st.text_input(
        "🔐 Enter Password",
        type="password",
        on_change=password_entered,
        key="password",
    )
    if "password_correct" in st.session_state:
        st.error("😞 Password incorrect.")
    else:
        st.info("🔒 This application is password protected to secure payment data.")
    return False


def output_filename(uploaded_name, mode, payment_date):
    """Name the download after the sheet, e.g. ``payroll_PDS_20240315.txt``."""
    stem = uploaded_name.rsplit(".", 1)[0] or "payments"
    return f"{stem}_{mode}_{payment_date.strftime('%Y%m%d')}.txt"


def show_summary(result):
    meta = result.metadata
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Client", meta.client_name)
        st.metric("Client Number", meta.client_number)
        st.metric("Payment Date", meta.payment_date.strftime("%Y-%m-%d"))
    with col2:
        st.metric("Payments", result.total_count)
        st.metric("Total Amount", f"${result.total_amount:,.2f} {meta.currency_code}")
        st.metric("Processing Centre", f"{meta.processing_centre} ({meta.processing_centre_name})")

    if result.suspended_rows:
        st.info(f"⏸️ {len(result.suspended_rows)} suspended row(s) left out: "
                + ", ".join(str(r) for r in result.suspended_rows))
    if result.rejected_rows:
        st.warning(f"⚠️ {len(result.rejected_rows)} invalid row(s) skipped")
        for err in result.rejected_rows:
            st.caption(f"• {err}")

    payments = pd.DataFrame(result.payment_rows())
    if not payments.empty:
        payments["Amount"] = payments["Amount"].map(lambda a: f"${a:,.2f}")
        st.subheader("Payments in File")
        st.dataframe(payments, use_container_width=True, hide_index=True)


def main():
    st.set_page_config(page_title="CPA-005 File Generator", page_icon="🏦")
    configure_logging()

    st.title("🏦 CPA-005 File Generator")
    st.markdown("Convert a payment spreadsheet into a CPA-005 debit or credit file for your bank")

    # Check password first - return early if not authenticated
    if not check_password():
        st.stop()

    with st.sidebar:
        st.header("⚙️ File Options")
        delimiter_name = st.selectbox(
            "Record separator",
            list(DELIMITER_LABELS),
            format_func=DELIMITER_LABELS.get,
            help="Strict CPA-005 ingestion may need records without separators",
        )
        skip_invalid = st.checkbox(
            "Skip invalid rows",
            value=False,
            help="Leave malformed rows out instead of stopping the conversion",
        )
        file_date = st.date_input("File Creation Date", datetime.now())

    st.header("File Type")
    mode = st.radio(
        "Transactions",
        list(MODE_LABELS),
        format_func=MODE_LABELS.get,
        horizontal=True,
    )

    st.header("Upload Payment Sheet")
    uploaded_file = st.file_uploader(
        "Choose an Excel or CSV file",
        type=["xlsx", "xls", "csv"],
        help="Rows 1-6 hold client name, client number, processing centre, currency, "
             "payment date and transaction code; payments start on row 8",
    )
    if not uploaded_file:
        return

    try:
        options = options_from_env(
            on_invalid_row="skip" if skip_invalid else "abort",
            file_date=file_date,
        ).with_delimiter(delimiter_name)
        with st.spinner(f"Reading {uploaded_file.name}..."):
            sheet = read_sheet(uploaded_file, filename=uploaded_file.name)
            result = assemble(sheet, mode, options)
    except (ConversionError, ValueError) as e:
        logger.warning("Conversion of %s failed: %s", uploaded_file.name, e)
        st.error(f"🚨 {e}")
        return

    st.success(f"✅ {MODE_LABELS[mode]} ready: {result.total_count} payment(s), "
               f"{len(result.rendered)} records")
    show_summary(result)

    content = result.to_bytes(options.record_delimiter, options.encoding)
    st.download_button(
        label="📥 Download CPA-005 File",
        data=content,
        file_name=output_filename(uploaded_file.name, mode, result.metadata.payment_date),
        mime="text/plain",
        type="primary",
    )

    with st.expander("Record Preview"):
        for record in result.rendered[:3]:
            st.code(record.rstrip(), language="text")
        if len(result.rendered) > 3:
            st.caption(f"... {len(result.rendered) - 3} more record(s)")


if __name__ == "__main__":
    main()
