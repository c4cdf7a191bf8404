from __future__ import annotations

import asyncio
import logging
from pathlib import PurePath

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from pdfrendr.analysis import assess
from pdfrendr.backends import PyMuPdfDocumentBuilder, PyMuPdfPageRenderer
from pdfrendr.config import Settings, load_settings
from pdfrendr.errors import ProcessingError
from pdfrendr.formatting import render_report
from pdfrendr.models import DocumentAssessment, ProcessingResult
from pdfrendr.processor import PdfRendr

LOGGER = logging.getLogger(__name__)


def _is_allowed_chat(chat_id: int, settings: Settings) -> bool:
    if not settings.allowed_chat_ids:
        return True
    return chat_id in settings.allowed_chat_ids


def _sanitized_name(file_name: str) -> str:
    return f"{PurePath(file_name).stem or 'document'}-sanitized.pdf"


async def _assess_and_sanitize(
    rendr: PdfRendr, original: bytes
) -> tuple[DocumentAssessment, ProcessingResult]:
    assessment = await asyncio.to_thread(assess, original)
    result = await rendr.sanitize(original)
    return assessment, result


def _build_rendr(settings: Settings) -> PdfRendr:
    return PdfRendr(
        renderer=PyMuPdfPageRenderer(),
        builder=PyMuPdfDocumentBuilder(),
        options=settings.processing_options(),
    )


def build_application(settings: Settings) -> Application:
    rendr = _build_rendr(settings)
    timeout_seconds = settings.timeout_ms / 1000
    application = Application.builder().token(settings.telegram_bot_token).build()

    async def start_handler(update: Update, _context: ContextTypes.DEFAULT_TYPE) -> None:
        if not update.message:
            return
        await update.message.reply_text(
            "Send me a PDF and I will rebuild it from page images, "
            "dropping scripts, actions and attachments."
        )

    async def help_handler(update: Update, _context: ContextTypes.DEFAULT_TYPE) -> None:
        if not update.message:
            return
        await update.message.reply_text(
            "How to use:\n"
            "1) Send or forward a PDF to this bot.\n"
            "2) Wait for the report and the rebuilt file.\n"
            "3) Open the rebuilt file instead of the original.\n\n"
            "Commands:\n"
            "/start\n"
            "/help\n"
            "/status"
        )

    async def status_handler(update: Update, _context: ContextTypes.DEFAULT_TYPE) -> None:
        if not update.message:
            return
        chat_scope = (
            "open to all chats"
            if not settings.allowed_chat_ids
            else f"restricted to {len(settings.allowed_chat_ids)} chat id(s)"
        )
        await update.message.reply_text(
            f"Bot status:\n"
            f"- Render quality: {settings.render_quality}x\n"
            f"- Compression level: {settings.compression_level}\n"
            f"- Timeout: {timeout_seconds:.0f} s\n"
            f"- Max PDF size: {settings.max_pdf_mb} MB\n"
            f"- Access: {chat_scope}"
        )

    async def pdf_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not update.message or not update.message.document or not update.effective_chat:
            return
        chat_id = update.effective_chat.id

        if not _is_allowed_chat(chat_id, settings):
            await update.message.reply_text("This bot is not allowed in this chat.")
            return

        doc = update.message.document
        file_size = doc.file_size or 0
        file_name = doc.file_name or "document.pdf"

        if file_size > settings.max_pdf_bytes:
            await update.message.reply_text(
                f"File too large ({file_size / (1024 * 1024):.2f} MB). "
                f"Max allowed is {settings.max_pdf_mb} MB."
            )
            return

        status_message = await update.message.reply_text("Downloading and rebuilding PDF...")
        try:
            telegram_file = await context.bot.get_file(doc.file_id)
            original = bytes(await telegram_file.download_as_bytearray())

            assessment, result = await asyncio.wait_for(
                _assess_and_sanitize(rendr, original), timeout=timeout_seconds
            )
        except ProcessingError as exc:
            LOGGER.warning("Processing failed for %s: %s", file_name, exc)
            await status_message.edit_text(
                f"Processing failed for this document ({exc}). The original was not changed."
            )
            return
        except asyncio.TimeoutError:
            LOGGER.warning("Processing timed out for %s.", file_name)
            await status_message.edit_text(
                f"Processing took longer than {timeout_seconds:.0f} s and was abandoned."
            )
            return
        except Exception:  # noqa: BLE001
            LOGGER.exception("Failed to process PDF.")
            await status_message.edit_text(
                "Failed to process that PDF due to an internal error."
            )
            return

        await update.message.reply_document(
            document=result.rebuilt_document,
            filename=_sanitized_name(file_name),
        )
        await status_message.edit_text(render_report(file_name, result, assessment))

    async def other_document_handler(
        update: Update, _context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        if not update.message:
            return
        await update.message.reply_text("Send a PDF document. Other file types are ignored.")

    async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        LOGGER.exception("Unhandled exception for update %s", update, exc_info=context.error)

    application.add_handler(CommandHandler("start", start_handler))
    application.add_handler(CommandHandler("help", help_handler))
    application.add_handler(CommandHandler("status", status_handler))
    application.add_handler(MessageHandler(filters.Document.PDF, pdf_handler))
    application.add_handler(
        MessageHandler(filters.Document.ALL & ~filters.Document.PDF, other_document_handler)
    )
    application.add_error_handler(error_handler)

    return application


def run_bot() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app = build_application(settings)
    app.run_polling(drop_pending_updates=True)
