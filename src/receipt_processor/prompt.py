"""Instruction prompt sent with every receipt to the vision model."""

from shared.validators import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    DEFAULT_EXPENSE_CATEGORY,
    DEFAULT_INCOME_CATEGORY
)


RECEIPT_PROMPT = f"""Bu dosya bir banka dekontu veya havale/EFT makbuzudur (görsel ya da PDF). \
Ziraat, DenizBank, Enpara, Yapı Kredi, Garanti, İş Bankası, Akbank gibi Türk bankalarına ait olabilir.

Dekonttaki bilgileri aşağıdaki JSON yapısında çıkar. Yalnızca JSON döndür, açıklama yazma.

{{
  "transactionDirection": "<income veya expense>",
  "amount": <masraflar hariç ana işlem tutarı, sayı, ondalık ayırıcı nokta>,
  "currency": "<para birimi kodu, örn: TRY>",

  "recipient": "<alıcı adı>",
  "recipientBank": "<alıcı bankası>",
  "recipientIban": "<alıcı IBAN, TR ile başlar, boşluksuz>",

  "sender": "<gönderen adı>",
  "senderBank": "<gönderen bankası>",
  "senderIban": "<gönderen IBAN, boşluksuz>",

  "bank": "<dekontu düzenleyen banka, örn: Ziraat Bankası>",
  "branchCode": "<şube kodu>",
  "branchName": "<şube adı>",

  "accountType": "<IBAN, Hesap No veya Kart>",
  "accountNumber": "<IBAN değilse hesap numarası>",

  "transactionType": "<işlem türü: FAST, EFT, Havale, Virman, Gelen/Giden Havale>",
  "transactionId": "<referans no, sorgu no veya dekont no>",
  "description": "<açıklama veya mesaj>",

  "commission": <komisyon, sayı>,
  "tax": <BSMV, sayı>,
  "totalFee": <toplam masraf, sayı>,

  "date": "<YYYY-MM-DD>",
  "time": "<HH:mm:ss>",

  "suggestedCategory": "<yöne uygun kategori listesinden tek bir değer>"
}}

İşlem yönü (transactionDirection):
- İşlem türünde veya başlıkta "Gelen", "Gelen Havale", "Gelen EFT", "Gelen FAST", "incoming" geçiyorsa "income".
- "Giden", "Giden Havale", "outgoing", "Ödeme", "payment" geçiyorsa veya para hesabımızdan çıkıyorsa "expense".
- Emin değilsen "expense".

Gider kategorileri (transactionDirection "expense" ise yalnızca bunlardan biri):
{", ".join(EXPENSE_CATEGORIES)}

Gelir kategorileri (transactionDirection "income" ise yalnızca bunlardan biri):
{", ".join(INCOME_CATEGORIES)}

Gider kategorisi seçerken:
- Alıcı bir kişiyse ve tutar düşükse "İşçi"
- Et, tavuk, balık: "Kasap"
- Toptan gıda, tedarikçi: "Toptancı"
- Taşımacılık, kargo: "Nakliye"
- Ekipman, tadilat, mobilya: "Yemekhane Kurulum"
- Ekmek, unlu mamul: "Fırın"
- Günlük alışveriş: "Market"
- Meyve, sebze: "Sebze-Meyve"
- Kira ödemesi: "Kira"
- Elektrik, su, doğalgaz, telefon: "Fatura"
- Emin değilsen "{DEFAULT_EXPENSE_CATEGORY}"

Gelir kategorisi seçerken emin değilsen "{DEFAULT_INCOME_CATEGORY}" yaz.

Kurallar:
- Görünmeyen veya okunamayan alanlar için null yaz.
- Tutarlar string değil sayı olmalı.
- Tarih ve saati dekonttaki haliyle oku, istenen formata çevir."""
