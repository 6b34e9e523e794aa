"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "ExamTrainer Admin Console"
LOGIN_DIALOG_TITLE: str = "Admin login"
LOGIN_FAILED_MESSAGE: str = "Invalid username or password."
STUDENT_URL_PLACEHOLDER: str = "http://<server-ip>:8000/"
PLACEHOLDER_QUESTION: str = "Enter the question text."

MODE_BUTTON_QUESTIONS: str = "Question Bank"
MODE_BUTTON_ACCESS_CODES: str = "Access Codes"
MODE_BUTTON_ABOUT: str = "About"
MODE_BUTTON_HELP: str = "Help"
MODE_BUTTON_LOGOUT: str = "Log out"

BANK_NEW_BUTTON: str = "New Question"
BANK_EDIT_BUTTON: str = "Edit"
BANK_DELETE_BUTTON: str = "Delete"
BANK_BULK_DELETE_BUTTON: str = "Delete Selected ({count})"
BANK_REFRESH_BUTTON: str = "Reload"
BANK_IMPORT_BUTTON: str = "Import CSV"
BANK_EXPORT_CSV_BUTTON: str = "Export CSV"
BANK_EXPORT_PDF_BUTTON: str = "Export PDF"
BANK_GUIDE_BUTTON: str = "Upload Study Guide"
BANK_GENERATE_BUTTON: str = "Generate with AI"
BANK_SEARCH_PLACEHOLDER: str = "Search questions and answers…"
BANK_TITLE_TEMPLATE: str = "Questions ({count})"
FILTER_ALL: str = "All"

CODES_GENERATE_BUTTON: str = "Create Code"
CODES_DELETE_BUTTON: str = "Delete"
CODES_COPY_BUTTON: str = "Copy Code"
CODES_REFRESH_BUTTON: str = "Reload"
CODES_NAME_PLACEHOLDER: str = "Student name"
CODES_EMAIL_PLACEHOLDER: str = "E-mail address"

IMPORT_DIALOG_TITLE: str = "Select question file"
IMPORT_FILE_FILTER: str = "CSV files (*.csv)"
EXPORT_CSV_DIALOG_TITLE: str = "Export questions as CSV"
EXPORT_CSV_FILE_FILTER: str = "CSV files (*.csv)"
EXPORT_PDF_DIALOG_TITLE: str = "Export question catalogue as PDF"
EXPORT_PDF_FILE_FILTER: str = "PDF files (*.pdf)"
GUIDE_DIALOG_TITLE: str = "Select study guide"
GUIDE_FILE_FILTER: str = "PDF files (*.pdf)"

NO_QUESTIONS_MESSAGE: str = "There are no questions to export."

STATUS_REFRESH_INTERVAL_MS: int = 2000
