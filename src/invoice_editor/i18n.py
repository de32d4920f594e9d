"""
Localization tables and lookup for the Invoice Editor.

Strings are looked up by key in the selected language, falling back to
English and finally to the key itself. Values may contain {{name}}
placeholders, substituted from keyword arguments:

    >>> translate("en", "invoiceSavedSuccess", invoiceNumber="INV-001")
    'Invoice INV-001 saved!'
"""

import re

from babel.core import negotiate_locale

DEFAULT_LANGUAGE = "en"

LANGUAGES: dict[str, str] = {
    "en": "English",
    "vi": "Tiếng Việt",
    "nl": "Nederlands",
}

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "loading": "Loading...",
        "errorOccurred": "An error occurred. Please try again.",
        "invoiceGenerator": "Invoice Generator",
        "signedInAs": "Signed in as",
        "myInvoices": "My Invoices",
        "signOut": "Sign out",
        "signInTitle": "Sign in to your account",
        "createAccountTitle": "Create a new account",
        "resetPasswordTitle": "Reset your password",
        "authDesc": "To access the Invoice Generator",
        "resetPasswordDesc": "Enter your email to receive a reset link",
        "emailAddress": "Email address",
        "password": "Password",
        "confirmPassword": "Confirm Password",
        "processing": "Processing...",
        "sendResetLink": "Send Reset Link",
        "signUp": "Sign Up",
        "signIn": "Sign In",
        "forgotPassword": "Forgot your password?",
        "backToSignIn": "Back to Sign In",
        "alreadyHaveAccount": "Already have an account? Sign In",
        "dontHaveAccount": "Don't have an account? Sign Up",
        "checkEmailReset": "Check your email for the password reset link!",
        "emailNotRegistered": "Email is not registered.",
        "passwordsDoNotMatch": "Passwords do not match.",
        "emailAlreadyRegistered": "Email is already registered.",
        "checkEmailConfirm": "Check your email for the confirmation link!",
        "updatePasswordTitle": "Update your password",
        "updatePasswordDesc": "Enter a new password for your account.",
        "newPassword": "New Password",
        "confirmNewPassword": "Confirm New Password",
        "passwordLengthError": "Password should be at least 6 characters.",
        "passwordUpdateSuccess": "Your password has been updated successfully!",
        "updating": "Updating...",
        "updatePasswordButton": "Update Password",
        "newInvoice": "New Invoice",
        "createNewInvoiceAria": "Create new invoice",
        "databaseSetupError": "Database not set up. Please run the SQL script in sql/invoices.sql.",
        "fetchInvoicesError": "Could not fetch invoices.",
        "deleteInvoiceError": "Failed to delete invoice.",
        "deleteInvoiceSuccess": "Invoice deleted.",
        "invoiceAlreadyDeleted": "This invoice was already deleted.",
        "loadingInvoices": "Loading invoices...",
        "noSavedInvoices": "No saved invoices yet.",
        "invoiceListNumber": "Invoice #",
        "invoiceListClient": "Client",
        "invoiceListDueDate": "Due Date",
        "invoiceListAmount": "Amount",
        "invoiceListActions": "Actions",
        "editInvoiceAria": "Edit invoice {{invoiceNumber}}",
        "deleteInvoiceAria": "Delete invoice {{invoiceNumber}}",
        "deleteConfirm": "Are you sure you want to delete invoice {{invoiceNumber}}?",
        "deleteInvoiceTitle": "Delete Invoice?",
        "cancel": "Cancel",
        "delete": "Delete",
        "editingInvoice": "Editing: {{invoiceNumber}}",
        "backToList": "Back to List",
        "saving": "Saving...",
        "updateInvoice": "Update Invoice",
        "saveInvoice": "Save Invoice",
        "from": "From",
        "name": "Name",
        "address": "Address",
        "email": "Email",
        "logo": "Logo",
        "uploadLogo": "Upload Logo",
        "removeLogo": "Remove",
        "logoSizeError": "Logo file size should be less than 2MB.",
        "logoSize": "Logo Size",
        "to": "To",
        "invoiceNumber": "Invoice Number",
        "date": "Date",
        "dueDate": "Due Date",
        "items": "Items",
        "description": "Description",
        "quantityShort": "Qty",
        "price": "Price",
        "addItem": "Add Item",
        "notes": "Notes",
        "taxRate": "Tax Rate (%)",
        "currency": "Currency",
        "invoiceTitle": "INVOICE",
        "billTo": "BILL TO",
        "item": "Item",
        "total": "Total",
        "subtotal": "Subtotal",
        "tax": "Tax",
        "generating": "Generating...",
        "downloadPdf": "Download PDF",
        "mustBeLoggedInToSave": "You must be logged in to save.",
        "failedToSaveInvoice": "Failed to save invoice. Please try again.",
        "invoiceSavedSuccess": "Invoice {{invoiceNumber}} saved!",
        "pdfLibraryNotFound": "PDF generation library not found.",
        "pdfGenerationError": "An error occurred while generating the PDF.",
        "authFailed": "{{detail}}",
        "invalidEmail": "Please enter a valid email address.",
        "logoWidthError": "Logo size must be between 50 and 300 pixels.",
        "toggleTheme": "Toggle theme",
        "undo": "Undo",
        "redo": "Redo",
        "language": "Language",
    },
    "vi": {
        "loading": "Đang tải...",
        "errorOccurred": "Đã xảy ra lỗi. Vui lòng thử lại.",
        "invoiceGenerator": "Tạo hoá đơn",
        "signedInAs": "Đăng nhập với tư cách",
        "myInvoices": "Hoá đơn của tôi",
        "signOut": "Đăng xuất",
        "signInTitle": "Đăng nhập vào tài khoản",
        "createAccountTitle": "Tạo tài khoản mới",
        "resetPasswordTitle": "Đặt lại mật khẩu",
        "authDesc": "Để truy cập Trình tạo hoá đơn",
        "resetPasswordDesc": "Nhập email để nhận liên kết đặt lại",
        "emailAddress": "Địa chỉ email",
        "password": "Mật khẩu",
        "confirmPassword": "Xác nhận mật khẩu",
        "processing": "Đang xử lý...",
        "sendResetLink": "Gửi liên kết",
        "signUp": "Đăng ký",
        "signIn": "Đăng nhập",
        "forgotPassword": "Quên mật khẩu?",
        "backToSignIn": "Quay lại Đăng nhập",
        "alreadyHaveAccount": "Đã có tài khoản? Đăng nhập",
        "dontHaveAccount": "Chưa có tài khoản? Đăng ký",
        "checkEmailReset": "Kiểm tra email của bạn để lấy liên kết đặt lại mật khẩu!",
        "emailNotRegistered": "Email chưa được đăng ký.",
        "passwordsDoNotMatch": "Mật khẩu không khớp.",
        "emailAlreadyRegistered": "Email đã được đăng ký.",
        "checkEmailConfirm": "Kiểm tra email của bạn để lấy liên kết xác nhận!",
        "updatePasswordTitle": "Cập nhật mật khẩu",
        "updatePasswordDesc": "Nhập mật khẩu mới cho tài khoản của bạn.",
        "newPassword": "Mật khẩu mới",
        "confirmNewPassword": "Xác nhận mật khẩu mới",
        "passwordLengthError": "Mật khẩu phải có ít nhất 6 ký tự.",
        "passwordUpdateSuccess": "Mật khẩu của bạn đã được cập nhật thành công!",
        "updating": "Đang cập nhật...",
        "updatePasswordButton": "Cập nhật mật khẩu",
        "newInvoice": "Hoá đơn mới",
        "createNewInvoiceAria": "Tạo hoá đơn mới",
        "databaseSetupError": "Cơ sở dữ liệu chưa được thiết lập. Vui lòng chạy tập lệnh SQL sql/invoices.sql.",
        "fetchInvoicesError": "Không thể tải hoá đơn.",
        "deleteInvoiceError": "Xóa hoá đơn thất bại.",
        "deleteInvoiceSuccess": "Đã xóa hoá đơn.",
        "invoiceAlreadyDeleted": "Hoá đơn này đã bị xoá trước đó.",
        "loadingInvoices": "Đang tải hoá đơn...",
        "noSavedInvoices": "Chưa có hoá đơn nào được lưu.",
        "invoiceListNumber": "Số HĐ",
        "invoiceListClient": "Khách hàng",
        "invoiceListDueDate": "Ngày hết hạn",
        "invoiceListAmount": "Số tiền",
        "invoiceListActions": "Hành động",
        "editInvoiceAria": "Chỉnh sửa hoá đơn {{invoiceNumber}}",
        "deleteInvoiceAria": "Xóa hoá đơn {{invoiceNumber}}",
        "deleteConfirm": "Bạn có chắc muốn xóa hoá đơn {{invoiceNumber}} không?",
        "deleteInvoiceTitle": "Xóa hóa đơn?",
        "cancel": "Hủy",
        "delete": "Xóa",
        "editingInvoice": "Đang sửa: {{invoiceNumber}}",
        "backToList": "Quay lại danh sách",
        "saving": "Đang lưu...",
        "updateInvoice": "Cập nhật hoá đơn",
        "saveInvoice": "Lưu hoá đơn",
        "from": "Từ",
        "name": "Tên",
        "address": "Địa chỉ",
        "email": "Email",
        "logo": "Logo",
        "uploadLogo": "Tải logo lên",
        "removeLogo": "Xóa",
        "logoSizeError": "Kích thước tệp logo phải nhỏ hơn 2MB.",
        "logoSize": "Kích thước Logo",
        "to": "Đến",
        "invoiceNumber": "Số hoá đơn",
        "date": "Ngày",
        "dueDate": "Ngày hết hạn",
        "items": "Các mục",
        "description": "Mô tả",
        "quantityShort": "SL",
        "price": "Giá",
        "addItem": "Thêm mục",
        "notes": "Ghi chú",
        "taxRate": "Thuế suất (%)",
        "currency": "Tiền tệ",
        "invoiceTitle": "HOÁ ĐƠN",
        "billTo": "THANH TOÁN CHO",
        "item": "Mục",
        "total": "Tổng cộng",
        "subtotal": "Tổng phụ",
        "tax": "Thuế",
        "generating": "Đang tạo...",
        "downloadPdf": "Tải PDF",
        "mustBeLoggedInToSave": "Bạn phải đăng nhập để lưu.",
        "failedToSaveInvoice": "Lưu hoá đơn thất bại. Vui lòng thử lại.",
        "invoiceSavedSuccess": "Đã lưu hoá đơn {{invoiceNumber}}!",
        "pdfLibraryNotFound": "Không tìm thấy thư viện tạo PDF.",
        "pdfGenerationError": "Đã xảy ra lỗi khi tạo PDF.",
        "authFailed": "{{detail}}",
        "invalidEmail": "Vui lòng nhập địa chỉ email hợp lệ.",
        "logoWidthError": "Kích thước logo phải từ 50 đến 300 pixel.",
        "toggleTheme": "Đổi giao diện",
        "undo": "Hoàn tác",
        "redo": "Làm lại",
        "language": "Ngôn ngữ",
    },
    "nl": {
        "loading": "Laden...",
        "errorOccurred": "Er is een fout opgetreden. Probeer het opnieuw.",
        "invoiceGenerator": "Factuur Generator",
        "signedInAs": "Aangemeld als",
        "myInvoices": "Mijn Facturen",
        "signOut": "Afmelden",
        "signInTitle": "Meld u aan bij uw account",
        "createAccountTitle": "Maak een nieuw account",
        "resetPasswordTitle": "Reset uw wachtwoord",
        "authDesc": "Om toegang te krijgen tot de Factuur Generator",
        "resetPasswordDesc": "Voer uw e-mailadres in om een resetlink te ontvangen",
        "emailAddress": "E-mailadres",
        "password": "Wachtwoord",
        "confirmPassword": "Bevestig Wachtwoord",
        "processing": "Verwerken...",
        "sendResetLink": "Verstuur Resetlink",
        "signUp": "Registreren",
        "signIn": "Aanmelden",
        "forgotPassword": "Wachtwoord vergeten?",
        "backToSignIn": "Terug naar Aanmelden",
        "alreadyHaveAccount": "Heeft u al een account? Aanmelden",
        "dontHaveAccount": "Geen account? Registreren",
        "checkEmailReset": "Controleer uw e-mail voor de wachtwoord resetlink!",
        "emailNotRegistered": "E-mail is niet geregistreerd.",
        "passwordsDoNotMatch": "Wachtwoorden komen niet overeen.",
        "emailAlreadyRegistered": "E-mail is al geregistreerd.",
        "checkEmailConfirm": "Controleer uw e-mail voor de bevestigingslink!",
        "updatePasswordTitle": "Update uw wachtwoord",
        "updatePasswordDesc": "Voer een nieuw wachtwoord in voor uw account.",
        "newPassword": "Nieuw Wachtwoord",
        "confirmNewPassword": "Bevestig Nieuw Wachtwoord",
        "passwordLengthError": "Wachtwoord moet minimaal 6 tekens lang zijn.",
        "passwordUpdateSuccess": "Uw wachtwoord is succesvol bijgewerkt!",
        "updating": "Bijwerken...",
        "updatePasswordButton": "Wachtwoord Updaten",
        "newInvoice": "Nieuwe Factuur",
        "createNewInvoiceAria": "Maak nieuwe factuur",
        "databaseSetupError": "Database niet ingesteld. Voer het SQL-script uit sql/invoices.sql.",
        "fetchInvoicesError": "Kon facturen niet ophalen.",
        "deleteInvoiceError": "Factuur verwijderen mislukt.",
        "deleteInvoiceSuccess": "Factuur verwijderd.",
        "invoiceAlreadyDeleted": "Deze factuur was al verwijderd.",
        "loadingInvoices": "Facturen laden...",
        "noSavedInvoices": "Nog geen opgeslagen facturen.",
        "invoiceListNumber": "Factuur #",
        "invoiceListClient": "Klant",
        "invoiceListDueDate": "Vervaldatum",
        "invoiceListAmount": "Bedrag",
        "invoiceListActions": "Acties",
        "editInvoiceAria": "Bewerk factuur {{invoiceNumber}}",
        "deleteInvoiceAria": "Verwijder factuur {{invoiceNumber}}",
        "deleteConfirm": "Weet u zeker dat u factuur {{invoiceNumber}} wilt verwijderen?",
        "deleteInvoiceTitle": "Factuur verwijderen?",
        "cancel": "Annuleren",
        "delete": "Verwijderen",
        "editingInvoice": "Bewerken: {{invoiceNumber}}",
        "backToList": "Terug naar lijst",
        "saving": "Opslaan...",
        "updateInvoice": "Factuur Bijwerken",
        "saveInvoice": "Factuur Opslaan",
        "from": "Van",
        "name": "Naam",
        "address": "Adres",
        "email": "E-mail",
        "logo": "Logo",
        "uploadLogo": "Upload Logo",
        "removeLogo": "Verwijder",
        "logoSizeError": "Logo bestandsgrootte moet minder dan 2MB zijn.",
        "logoSize": "Logo Grootte",
        "to": "Aan",
        "invoiceNumber": "Factuurnummer",
        "date": "Datum",
        "dueDate": "Vervaldatum",
        "items": "Items",
        "description": "Beschrijving",
        "quantityShort": "Aant",
        "price": "Prijs",
        "addItem": "Item Toevoegen",
        "notes": "Notities",
        "taxRate": "Btw-tarief (%)",
        "currency": "Valuta",
        "invoiceTitle": "FACTUUR",
        "billTo": "FACTUUR AAN",
        "item": "Item",
        "total": "Totaal",
        "subtotal": "Subtotaal",
        "tax": "Btw",
        "generating": "Genereren...",
        "downloadPdf": "Download PDF",
        "mustBeLoggedInToSave": "U moet ingelogd zijn om op te slaan.",
        "failedToSaveInvoice": "Opslaan van factuur mislukt. Probeer het opnieuw.",
        "invoiceSavedSuccess": "Factuur {{invoiceNumber}} opgeslagen!",
        "pdfLibraryNotFound": "PDF-generatiebibliotheek niet gevonden.",
        "pdfGenerationError": "Er is een fout opgetreden bij het genereren van de PDF.",
        "authFailed": "{{detail}}",
        "invalidEmail": "Voer een geldig e-mailadres in.",
        "logoWidthError": "Logo grootte moet tussen 50 en 300 pixels liggen.",
        "toggleTheme": "Thema wisselen",
        "undo": "Ongedaan maken",
        "redo": "Opnieuw",
        "language": "Taal",
    },
}


def normalize_language(tag: str | None) -> str | None:
    """Reduce a tag such as "nl-BE" to a supported language, or None."""
    if not tag:
        return None
    language = tag.replace("_", "-").split("-")[0].lower()
    return language if language in LANGUAGES else None


def accepted_languages(header: str | None) -> list[str]:
    """
    Tags of an Accept-Language header, highest quality first.

    Ties keep their order in the header. Tags weighted q=0 and the "*"
    wildcard are dropped.

        >>> accepted_languages("fr-FR, vi;q=0.9, nl;q=0.95")
        ['fr-FR', 'nl', 'vi']
    """
    weighted = []
    for position, part in enumerate((header or "").split(",")):
        tag, _, params = part.partition(";")
        tag = tag.strip().replace("_", "-")
        quality = 1.0
        for param in params.split(";"):
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if tag and tag != "*" and quality > 0:
            weighted.append((-quality, position, tag))
    return [tag for _, _, tag in sorted(weighted)]


def detect_language(saved: str | None = None, browser: str | None = None) -> str:
    """
    Choose the initial UI language.

    The saved preference wins, then the best supported language of the
    browser's Accept-Language header, then English.
    """
    language = normalize_language(saved)
    if language:
        return language
    negotiated = negotiate_locale(accepted_languages(browser), list(LANGUAGES), sep="-", aliases=None)
    return normalize_language(negotiated) or DEFAULT_LANGUAGE


def translate(language: str, key: str, **params) -> str:
    """
    Look up a string and substitute its {{placeholders}}.

    Unknown placeholders are left as written; unknown keys return the key.
    """
    table = TRANSLATIONS.get(language, {})
    text = table.get(key) or TRANSLATIONS[DEFAULT_LANGUAGE].get(key) or key
    if not params:
        return text
    return _PLACEHOLDER.sub(
        lambda match: str(params[match.group(1)]) if match.group(1) in params else match.group(0),
        text,
    )


class Translator:
    """Lookup bound to one language, as handed to views and the preview."""

    def __init__(self, language: str = DEFAULT_LANGUAGE) -> None:
        self.language = normalize_language(language) or DEFAULT_LANGUAGE

    def __call__(self, key: str, **params) -> str:
        return translate(self.language, key, **params)

    def labels(self) -> dict[str, str]:
        """All strings of the language (English filling any gaps)."""
        return {**TRANSLATIONS[DEFAULT_LANGUAGE], **TRANSLATIONS[self.language]}
