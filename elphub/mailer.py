"""Transactional e-mail through Resend: lead replies, signature requests and confirmations."""

from __future__ import annotations

import base64
import html
import logging
from datetime import date, datetime
from typing import Any
from urllib.parse import quote

import httpx

from elphub.config import DEFAULT_ADMIN_EMAIL, DEFAULT_EMAIL_FROM, DEFAULT_SITE_URL, Settings
from elphub.crud import SupabaseCRUD
from elphub.errors import ConfigurationError, HubError, NotFoundError, ValidationError
from elphub.models import EmailAttachment, ReplyType, SignatureSettings, Signer

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"

SIGNER_MESSAGES: dict[str, dict[str, str]] = {
    "pt": {
        "subject": 'Sua vez de assinar: "{doc}"',
        "title": "Documento Aguardando Sua Assinatura",
        "greeting": "Prezado(a) {name},",
        "message": 'O documento <strong>"{doc}"</strong> está aguardando sua assinatura digital.',
        "previous": "{name} já assinou este documento.",
        "progress": "Assinatura {current} de {total}",
        "cta": "Assinar Documento Agora",
        "footer": "Este é um e-mail automático. Não responda.",
        "legal": "Assinatura eletrônica com validade jurídica conforme Lei 14.063/2020.",
    },
    "en": {
        "subject": 'Your turn to sign: "{doc}"',
        "title": "Document Awaiting Your Signature",
        "greeting": "Dear {name},",
        "message": 'The document <strong>"{doc}"</strong> is waiting for your digital signature.',
        "previous": "{name} has already signed this document.",
        "progress": "Signature {current} of {total}",
        "cta": "Sign Document Now",
        "footer": "This is an automated email. Please do not reply.",
        "legal": "Electronic signature with legal validity.",
    },
    "es": {
        "subject": 'Tu turno de firmar: "{doc}"',
        "title": "Documento Esperando Tu Firma",
        "greeting": "Estimado/a {name},",
        "message": 'El documento <strong>"{doc}"</strong> está esperando tu firma digital.',
        "previous": "{name} ya ha firmado este documento.",
        "progress": "Firma {current} de {total}",
        "cta": "Firmar Documento Ahora",
        "footer": "Este es un correo automático. No responda.",
        "legal": "Firma electrónica con validez legal.",
    },
    "it": {
        "subject": 'Il tuo turno di firmare: "{doc}"',
        "title": "Documento in Attesa della Tua Firma",
        "greeting": "Gentile {name},",
        "message": 'Il documento <strong>"{doc}"</strong> è in attesa della tua firma digitale.',
        "previous": "{name} ha già firmato questo documento.",
        "progress": "Firma {current} di {total}",
        "cta": "Firma Documento Ora",
        "footer": "Questa è un'email automatica. Non rispondere.",
        "legal": "Firma elettronica con validità legale secondo il Regolamento eIDAS.",
    },
    "zh": {
        "subject": '轮到您签署了："{doc}"',
        "title": "文件等待您的签名",
        "greeting": "尊敬的 {name}，",
        "message": '文件 <strong>"{doc}"</strong> 正在等待您的数字签名。',
        "previous": "{name} 已签署此文件。",
        "progress": "签名 {current}/{total}",
        "cta": "立即签署文件",
        "footer": "这是一封自动邮件，请勿回复。",
        "legal": "具有法律效力的电子签名。",
    },
}


CONFIRMATION_MESSAGES: dict[str, dict[str, str]] = {
    "pt": {
        "subject": "Confirmação de Assinatura Digital - ELP Alliance",
        "greeting": "Prezado(a)",
        "intro": "Sua assinatura digital foi registrada com sucesso.",
        "document": "Documento",
        "date": "Data/Hora",
        "type": "Tipo de Assinatura",
        "hash": "Hash de Verificação",
        "drawn": "Manuscrita Digital",
        "typed": "Digitada",
        "initials": "Iniciais",
        "upload": "Upload de Imagem",
        "legal": "Este documento possui validade jurídica conforme a Lei 14.063/2020 (Brasil) "
                 "e regulação eIDAS (União Europeia).",
        "access": "Acessar Documento",
        "next_steps": "Nossa equipe analisará seu documento e entrará em contato em breve.",
    },
    "en": {
        "subject": "Digital Signature Confirmation - ELP Alliance",
        "greeting": "Dear",
        "intro": "Your digital signature has been successfully recorded.",
        "document": "Document",
        "date": "Date/Time",
        "type": "Signature Type",
        "hash": "Verification Hash",
        "drawn": "Handwritten Digital",
        "typed": "Typed",
        "initials": "Initials",
        "upload": "Image Upload",
        "legal": "This document has legal validity according to Law 14.063/2020 (Brazil) "
                 "and EU eIDAS regulation.",
        "access": "Access Document",
        "next_steps": "Our team will review your document and contact you shortly.",
    },
    "es": {
        "subject": "Confirmación de Firma Digital - ELP Alliance",
        "greeting": "Estimado(a)",
        "intro": "Su firma digital ha sido registrada con éxito.",
        "document": "Documento",
        "date": "Fecha/Hora",
        "type": "Tipo de Firma",
        "hash": "Hash de Verificación",
        "drawn": "Manuscrita Digital",
        "typed": "Digitada",
        "initials": "Iniciales",
        "upload": "Carga de Imagen",
        "legal": "Este documento tiene validez legal según la Ley 14.063/2020 (Brasil) "
                 "y la regulación eIDAS (UE).",
        "access": "Acceder al Documento",
        "next_steps": "Nuestro equipo analizará su documento y se pondrá en contacto pronto.",
    },
    "it": {
        "subject": "Conferma Firma Digitale - ELP Alliance",
        "greeting": "Gentile",
        "intro": "La tua firma digitale è stata registrata con successo.",
        "document": "Documento",
        "date": "Data/Ora",
        "type": "Tipo di Firma",
        "hash": "Hash di Verifica",
        "drawn": "Manoscritta Digitale",
        "typed": "Digitata",
        "initials": "Iniziali",
        "upload": "Caricamento Immagine",
        "legal": "Questo documento ha validità legale secondo la Legge 14.063/2020 (Brasile) "
                 "e il regolamento eIDAS (UE).",
        "access": "Accedi al Documento",
        "next_steps": "Il nostro team esaminerà il tuo documento e ti contatterà a breve.",
    },
    "zh": {
        "subject": "数字签名确认 - ELP Alliance",
        "greeting": "尊敬的",
        "intro": "您的数字签名已成功记录。",
        "document": "文件",
        "date": "日期/时间",
        "type": "签名类型",
        "hash": "验证哈希",
        "drawn": "手写数字",
        "typed": "输入",
        "initials": "首字母",
        "upload": "图片上传",
        "legal": "根据第14.063/2020号法律（巴西）和欧盟eIDAS法规，本文件具有法律效力。",
        "access": "访问文件",
        "next_steps": "我们的团队将审核您的文件并尽快与您联系。",
    },
}

SIGNATURE_TYPES = ("drawn", "typed", "initials", "upload")

# strftime patterns matching each locale's numeric date/time order.
SIGNED_AT_FORMATS: dict[str, str] = {
    "pt": "%d/%m/%Y %H:%M:%S",
    "es": "%d/%m/%Y %H:%M:%S",
    "it": "%d/%m/%Y %H:%M:%S",
    "en": "%m/%d/%Y, %I:%M:%S %p",
    "zh": "%Y/%m/%d %H:%M:%S",
}


def format_signed_at(value: str | None, language: str) -> str:
    """Render an ISO timestamp for the signer's locale; unparseable values pass through."""
    if not value:
        return "N/A"
    try:
        signed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return signed.strftime(SIGNED_AT_FORMATS.get(language, SIGNED_AT_FORMATS["en"]))


class ResendMailer:
    def __init__(self, api_key: str, sender: str = DEFAULT_EMAIL_FROM, http: httpx.Client | None = None) -> None:
        self.api_key = api_key
        self.sender = sender
        self._http = http or httpx.Client(timeout=30)

    def send(
        self,
        to: str | list[str],
        subject: str,
        html_body: str,
        cc: list[str] | None = None,
        bcc: list[str] | None = None,
        attachments: list[dict[str, str]] | None = None,
    ) -> dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("RESEND_API_KEY not configured")
        payload: dict[str, Any] = {
            "from": self.sender,
            "to": [to] if isinstance(to, str) else list(to),
            "subject": subject,
            "html": html_body,
        }
        if cc:
            payload["cc"] = cc
        if bcc:
            payload["bcc"] = bcc
        if attachments:
            payload["attachments"] = attachments

        try:
            resp = self._http.post(RESEND_URL, headers={"Authorization": f"Bearer {self.api_key}"}, json=payload)
        except httpx.HTTPError as e:
            raise HubError(f"Resend request failed: {e}") from e
        if resp.status_code >= 300:
            logger.error("Resend error %d: %s", resp.status_code, resp.text[:200])
            raise HubError(f"Resend error {resp.status_code}: {resp.text[:200]}")
        logger.info("E-mail sent to %s: %s", payload["to"], subject)
        return resp.json()


def signature_html(signature: SignatureSettings) -> str:
    lines = []
    if signature.sender_name:
        lines.append(f"<strong>{html.escape(signature.sender_name)}</strong>")
    if signature.sender_position:
        lines.append(html.escape(signature.sender_position))
    lines.append(f"<strong>{html.escape(signature.company_name)}</strong>")
    lines.append(f"<em>{html.escape(signature.company_slogan)}</em>")
    lines.append(html.escape(signature.sender_phone or signature.company_phone))
    lines.append(f"{html.escape(signature.company_email)} | {html.escape(signature.company_website)}")
    lines.append(html.escape(signature.company_locations))
    return "<p>" + "<br>".join(lines) + "</p>"


def reply_html(to_name: str, content: str, signature: SignatureSettings, show_notice: bool = True) -> str:
    notice = "<p>Estamos à disposição para esclarecer qualquer dúvida.</p>" if show_notice else ""
    return (
        f"<p>Prezado(a) <strong>{html.escape(to_name)}</strong>,</p>"
        f"{content}{notice}{signature_html(signature)}"
        f"<p><small>© {date.today().year} ELP Alliance S/A | São Paulo, Brasil | Milão, Itália</small></p>"
    )


class EmailService:
    """The send-reply-email, notify-next-signer and send-signature-confirmation flows."""

    def __init__(self, mailer: ResendMailer, crud: SupabaseCRUD | None = None,
                 site_url: str = DEFAULT_SITE_URL, http: httpx.Client | None = None,
                 admin_email: str = DEFAULT_ADMIN_EMAIL) -> None:
        self.mailer = mailer
        self.crud = crud
        self.site_url = site_url.rstrip("/")
        self.admin_email = admin_email
        self._http = http or httpx.Client(timeout=60, follow_redirects=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailService:
        crud = SupabaseCRUD.from_settings(settings) if settings.supabase_configured else None
        return cls(
            ResendMailer(settings.resend_api_key, settings.email_from),
            crud,
            settings.site_url,
            admin_email=settings.admin_email,
        )

    def load_signature(self) -> SignatureSettings:
        if self.crud is None:
            return SignatureSettings()
        resp = self.crud.latest_row("email_signature_settings", order_by="updated_at")
        if not resp.ok:
            logger.info("Could not fetch signature settings, using defaults: %s", resp.error)
            return SignatureSettings()
        return SignatureSettings.from_row(resp.data)

    def fetch_attachments(self, attachments: list[EmailAttachment]) -> list[dict[str, str]]:
        """Download and base64-encode attachments; ones that fail are skipped."""
        encoded = []
        for attachment in attachments:
            try:
                resp = self._http.get(attachment.url)
            except httpx.HTTPError as e:
                logger.error("Error processing attachment %s: %s", attachment.name, e)
                continue
            if resp.status_code >= 400:
                logger.error("Failed to fetch attachment %s: HTTP %d", attachment.name, resp.status_code)
                continue
            encoded.append({
                "filename": attachment.name,
                "content": base64.b64encode(resp.content).decode("ascii"),
            })
            logger.info("Attachment processed: %s (%d bytes)", attachment.name, len(resp.content))
        return encoded

    def send_reply_email(self, request: dict[str, Any]) -> dict[str, Any]:
        to = request.get("to")
        if not to:
            raise ValidationError("Missing to")
        to_name = request.get("toName") or ""
        reply_type = request.get("replyType") or ReplyType.CUSTOM.value
        document_name = html.escape(request.get("documentName") or "Documento")
        document_type = request.get("documentType")
        signature = self.load_signature()
        subject = request.get("subject") or ""

        if reply_type == ReplyType.DOCUMENT_RECEIVED.value:
            subject = f"Documento recebido - {document_type or 'Novo documento'} - ELP Green"
            content = (
                "<p>Recebemos um novo documento em sua pasta de parceiro na ELP Green Technology.</p>"
                f"<p><strong>{document_name}</strong><br>Tipo: {html.escape(document_type or 'Geral')}</p>"
                "<p>Documento adicionado à sua pasta. "
                "Nossa equipe analisará o documento e entrará em contato se necessário.</p>"
            )
            body = reply_html(to_name, content, signature, show_notice=False)
        elif reply_type == ReplyType.DOCUMENT_SIGNED.value:
            subject = "Documento assinado com sucesso - ELP Green"
            content = (
                "<p>Seu documento foi assinado digitalmente com sucesso e está armazenado "
                "de forma segura em nosso sistema.</p>"
                f"<p><strong>Assinatura Digital Validada</strong><br>{document_name}</p>"
                "<p>Uma cópia do documento assinado foi registrada em nosso sistema com validade legal.</p>"
            )
            body = reply_html(to_name, content, signature, show_notice=False)
        elif reply_type == ReplyType.FORM_CONFIRMATION.value:
            subject = "Novo envio recebido - ELP Green Technology"
            form = "registro no Marketplace" if request.get("formType") == "marketplace" else "formulário de contato"
            count = request.get("submissionCount") or "nova"
            content = (
                "<p><strong>Identificamos você em nosso sistema!</strong><br>"
                f"Esta é sua {count}ª submissão. Todos os seus envios ficam organizados na mesma pasta.</p>"
                f"<p>Recebemos seu novo {form} e ele foi automaticamente adicionado ao seu "
                "histórico de interações conosco.</p>"
                "<p>Nossa equipe analisará sua solicitação e entrará em contato em breve com "
                "prioridade, já que você é um parceiro existente.</p>"
            )
            body = reply_html(to_name, content, signature, show_notice=False)
        else:
            message = html.escape(request.get("message") or "").replace("\n", "<br>")
            body = reply_html(to_name, f"<p>{message}</p>", signature)

        attachments = [
            EmailAttachment(name=a.get("name", "attachment"), url=a["url"])
            for a in request.get("attachments") or []
            if isinstance(a, dict) and a.get("url")
        ]
        logger.info("Sending reply e-mail to %s (type=%s, attachments=%d)", to, reply_type, len(attachments))
        data = self.mailer.send(
            to,
            subject,
            body,
            cc=request.get("cc") or None,
            bcc=request.get("bcc") or None,
            attachments=self.fetch_attachments(attachments),
        )
        return {"success": True, "data": data}

    def sign_link(self, document_id: str) -> str:
        return f"{self.site_url}/sign/{document_id}"

    def _next_signer_from_document(self, document_id: str) -> dict[str, Any] | None:
        if self.crud is None:
            raise ConfigurationError("Missing Supabase configuration")
        resp = self.crud.fetch_rows("generated_documents", filters={"id": document_id}, limit=1)
        if not resp.ok or not resp.data:
            raise NotFoundError(f"Document not found: {document_id}")
        doc = resp.data[0]

        field_values = doc.get("field_values") or {}
        signers = sorted(
            (Signer.from_dict(s) for s in field_values.get("signers") or []),
            key=lambda s: s.order,
        )
        current = doc.get("current_signatures") or 0
        pending = next((s for i, s in enumerate(signers) if i >= current and s.status == "pending"), None)
        if pending is None:
            return None
        return {
            "documentId": document_id,
            "documentName": doc.get("document_name"),
            "nextSignerEmail": pending.email,
            "nextSignerName": pending.name,
            "signatureLink": self.sign_link(document_id),
            "previousSignerName": signers[current - 1].name if 0 < current <= len(signers) else None,
            "currentSignatureNumber": current + 1,
            "totalSignatures": doc.get("required_signatures") or len(signers) or 1,
            "language": doc.get("language") or "pt",
        }

    def notify_next_signer(self, request: dict[str, Any]) -> dict[str, Any]:
        document_id = request.get("documentId")
        if not document_id:
            raise ValidationError("Missing documentId")

        data = dict(request)
        if not data.get("nextSignerEmail") or not data.get("documentName"):
            logger.info("Fetching document details from database for %s", document_id)
            resolved = self._next_signer_from_document(document_id)
            if resolved is None:
                return {"success": True, "message": "No pending signers"}
            data = resolved

        t = SIGNER_MESSAGES.get(data.get("language") or "pt", SIGNER_MESSAGES["pt"])
        document_name = data.get("documentName") or "Document"
        signer_name = data.get("nextSignerName") or "Signatory"
        signer_email = data.get("nextSignerEmail") or ""
        link = data.get("signatureLink") or self.sign_link(document_id)
        if not signer_email:
            raise ValidationError("No signer email available")

        if self.crud is not None:
            update = self.crud.update_rows(
                "generated_documents",
                {"id": document_id},
                {
                    "pending_signer_email": signer_email,
                    "pending_signer_name": signer_name,
                    "signature_status": "awaiting_signature",
                },
            )
            if not update.ok:
                logger.error("Failed to update pending signer for %s: %s", document_id, update.error)

        previous = data.get("previousSignerName")
        body = "".join([
            f"<p><small>{t['progress'].format(current=data.get('currentSignatureNumber') or 1, total=data.get('totalSignatures') or 1)}</small></p>",
            f"<h2>{t['title']}</h2>",
            f"<p>{t['greeting'].format(name=html.escape(signer_name))}</p>",
            f"<p>{t['message'].format(doc=html.escape(document_name))}</p>",
            f"<p>✓ {t['previous'].format(name=html.escape(previous))}</p>" if previous else "",
            f'<p><a href="{html.escape(link)}">{t["cta"]}</a></p>',
            f"<p><small>{t['legal']}</small></p>",
            f"<p><small>{t['footer']}<br>ELP Alliance S/A - ELP Green Technology</small></p>",
        ])
        response = self.mailer.send(signer_email, t["subject"].format(doc=document_name), body)
        logger.info("Next signer notification sent to %s for document %s", signer_email, document_id)
        return {"success": True, "emailResponse": response}

    def send_signature_confirmation(self, request: dict[str, Any]) -> dict[str, Any]:
        """Confirm a completed signature to the signer and notify the admin inbox."""
        signer_email = request.get("signerEmail")
        if not signer_email:
            raise ValidationError("Missing signerEmail")

        language = request.get("language") or "pt"
        t = CONFIRMATION_MESSAGES.get(language, CONFIRMATION_MESSAGES["pt"])
        document_name = html.escape(request.get("documentName") or "Documento")
        signer_name = html.escape(request.get("signerName") or "")
        signed_at = html.escape(format_signed_at(request.get("signedAt"), language))
        raw_type = request.get("signatureType") or ""
        signature_type = html.escape(t[raw_type] if raw_type in SIGNATURE_TYPES else raw_type or "N/A")
        signature_hash = html.escape(request.get("signatureHash") or "")
        link = f"{self.site_url}/sign?doc={quote(str(request.get('documentId') or ''))}"

        details = (
            f"<p>{t['document']}: <strong>{document_name}</strong><br>"
            f"{t['date']}: {signed_at}<br>"
            f"{t['type']}: {signature_type}</p>"
            f"<p><small>{t['hash']}: <code>{signature_hash}</code></small></p>"
        )
        body = "".join([
            f"<h2>✓ {t['intro']}</h2>",
            f"<p>{t['greeting']} <strong>{signer_name}</strong>,</p>",
            details,
            f"<p>{t['legal']}</p>",
            f"<p>{t['next_steps']}</p>",
            f'<p><a href="{html.escape(link)}">{t["access"]}</a></p>',
            f"<p><small>© {date.today().year} ELP Alliance S/A | São Paulo, Brasil | Milão, Itália</small></p>",
        ])
        response = self.mailer.send(signer_email, t["subject"], body)
        logger.info("Signature confirmation sent to %s", signer_email)

        admin_body = (
            "<h2>Assinatura Recebida</h2>"
            f"<p>Documento: <strong>{document_name}</strong><br>"
            f"Assinante: {signer_name} &lt;{html.escape(signer_email)}&gt;<br>"
            f"Data/Hora: {signed_at}<br>Tipo: {signature_type}<br>Hash: <code>{signature_hash}</code></p>"
            f'<p><a href="{self.site_url}/admin">Ver no Painel Admin</a></p>'
        )
        try:
            self.mailer.send(
                self.admin_email,
                f"✓ Assinado: {request.get('documentName') or 'Documento'} - {request.get('signerName') or ''}",
                admin_body,
            )
        except HubError as e:
            logger.error("Admin signature notification failed: %s", e.message)
        return {"success": True, "emailResponse": response}
