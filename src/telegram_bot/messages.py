"""Chat message texts and composition."""

from typing import Any, Dict, List, Optional

from transactions.models import Income, Transaction


PROCESSING_MESSAGE = "🔍 Dekont analiz ediliyor..."

SEND_RECEIPT_HINT = (
    "📸 Lütfen bir dekont/makbuz görseli veya PDF gönderin.\n\n"
    "Yardım için /help yazın."
)

START_MESSAGE = (
    "👋 Merhaba! Gider Tablosu botuna hoş geldiniz.\n\n"
    "📸 Bana bir dekont/makbuz görseli veya PDF gönderin, otomatik olarak analiz edip sisteme ekleyeyim.\n\n"
    "📋 Komutlar:\n"
    "/start - Başlangıç\n"
    "/help - Yardım\n"
    "/stats - Bu ayki özet\n"
    "/son - Son 5 işlem\n"
    "/id - Telegram ID'nizi öğrenin"
)

HELP_MESSAGE = (
    "📖 Kullanım Kılavuzu\n\n"
    "1️⃣ Dekont görselini veya PDF'i bu bota gönderin\n"
    "2️⃣ Bot dosyayı yapay zeka ile analiz eder\n"
    "3️⃣ Gelen havaleler gelir, giden ödemeler gider olarak kaydedilir\n"
    "4️⃣ Size detaylı onay mesajı gönderilir\n\n"
    "💡 İpucu: Görsel net ve okunaklı olmalı."
)

NO_RECORDS_MESSAGE = "📭 Henüz kayıtlı işlem yok."
RECENT_FAILED_MESSAGE = "❌ İşlemler alınırken bir hata oluştu."
STATS_FAILED_MESSAGE = "❌ İstatistikler alınırken bir hata oluştu."

MONTH_NAMES = [
    "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
    "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık"
]

CURRENCY_SYMBOLS = {'TRY': '₺', 'USD': '$', 'EUR': '€', 'GBP': '£'}


def format_currency(amount: Optional[float], currency: str = 'TRY') -> str:
    """Format an amount the Turkish way, e.g. ₺1.500,00."""
    if amount is None:
        return "Bilinmiyor"

    grouped = f"{amount:,.2f}".replace(',', '_').replace('.', ',').replace('_', '.')
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{symbol}{grouped}"
    return f"{grouped} {currency}"


def format_date(iso_date: Optional[str]) -> Optional[str]:
    """YYYY-MM-DD -> DD.MM.YYYY."""
    if not iso_date or len(iso_date) < 10:
        return iso_date
    year, month, day = iso_date[:10].split('-')
    return f"{day}.{month}.{year}"


def id_message(user_id: Any) -> str:
    return f"🆔 Telegram ID'niz: {user_id}"


def confirmation_message(transaction: Transaction) -> str:
    """
    Build the confirmation sent after a receipt is saved.

    Expenses lead with the recipient, incomes with the sender.
    """
    is_income = isinstance(transaction, Income)
    lines = ["✅ Gelir kaydedildi!" if is_income else "✅ Gider kaydedildi!", ""]

    lines.append(f"💰 Tutar: {format_currency(transaction.amount, transaction.currency)}")
    if transaction.total_fee:
        lines.append(f"   └ Masraf: {format_currency(transaction.total_fee, transaction.currency)}")
    lines.append("")

    if is_income:
        lines.append(f"👤 Gönderen: {transaction.sender}")
        _add_detail(lines, "Banka", transaction.sender_bank)
        _add_detail(lines, "IBAN", transaction.sender_iban)
        if transaction.recipient:
            lines.append(f"📥 Alıcı: {transaction.recipient}")
    else:
        lines.append(f"👤 Alıcı: {transaction.recipient}")
        _add_detail(lines, "Banka", transaction.recipient_bank)
        _add_detail(lines, "IBAN", transaction.recipient_iban)

    lines.append("")
    lines.append(f"🏦 {'Banka' if is_income else 'Gönderen Banka'}: {transaction.bank}")
    _add_detail(lines, "Şube", transaction.branch_name)
    _add_detail(lines, "Şube Kodu", transaction.branch_code)

    if transaction.transaction_type or transaction.transaction_id:
        lines.append("")
        if transaction.transaction_type:
            lines.append(f"📋 İşlem Türü: {transaction.transaction_type}")
        _add_detail(lines, "Referans No", transaction.transaction_id)

    lines.append("")
    lines.append(f"📁 Kategori: {transaction.category}")

    date_line = f"📅 Tarih: {format_date(transaction.date)}"
    if transaction.time:
        date_line += f" {transaction.time}"
    lines.append(date_line)

    if transaction.description:
        lines.append(f"📝 Açıklama: {transaction.description}")

    return "\n".join(lines)


def recent_message(items: List[Dict[str, Any]]) -> str:
    """List of the latest records for /son."""
    if not items:
        return NO_RECORDS_MESSAGE

    lines = [f"📋 Son {len(items)} İşlem:", ""]
    for index, item in enumerate(items, start=1):
        is_income = item.get('kind') == 'income'
        counterparty = item.get('sender') if is_income else item.get('recipient')
        marker = "🟢" if is_income else "🔴"
        lines.append(
            f"{index}. {marker} {format_currency(item.get('amount'), item.get('currency', 'TRY'))} - {counterparty}"
        )
        lines.append(f"   {item.get('bank')} | {item.get('category')} | {format_date(item.get('date'))}")
        lines.append("")

    return "\n".join(lines).rstrip()


def stats_message(summary: Dict[str, Any], month: int) -> str:
    """Current-month summary for /stats."""
    lines = [f"📊 {MONTH_NAMES[month - 1]} Özeti", ""]
    lines.append(f"💰 Toplam Gider: {format_currency(summary['expense_total'])}")
    if summary['fee_total']:
        lines.append(f"💸 Toplam Masraf: {format_currency(summary['fee_total'])}")
    lines.append(f"📥 Toplam Gelir: {format_currency(summary['income_total'])}")
    lines.append(f"📝 İşlem Sayısı: {summary['expense_count'] + summary['income_count']}")

    if summary['top_categories']:
        lines.append("")
        lines.append("📈 En Çok Harcanan Kategoriler:")
        for index, (name, total) in enumerate(summary['top_categories'], start=1):
            lines.append(f"{index}. {name}: {format_currency(total)}")

    return "\n".join(lines)


def _add_detail(lines: List[str], label: str, value: Optional[str]) -> None:
    if value:
        lines.append(f"   └ {label}: {value}")
