"""
Wellness Affirmations — Telegram Bot.

Telegram is the user interface for the daily affirmation feature: users
read today's affirmation, pick the categories they care about, and choose
the language affirmations are shown in.

Security-first: unauthorized users are silently ignored.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Coroutine

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.helpers import escape_markdown
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
)

from wellness.config import settings
from wellness.core.affirmation_engine import EmptyReason
from wellness.core.localization import (
    SUPPORTED_LANGUAGES,
    normalize_language,
    resolve,
    resolve_url,
)
from wellness.ports.store_port import StoreUnavailable

if TYPE_CHECKING:
    from wellness.core.affirmation_engine import DailyAffirmationEngine
    from wellness.data.models import AffirmationCategory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def authorized_only(
    func: Callable[..., Coroutine[Any, Any, None]],
) -> Callable[..., Coroutine[Any, Any, None]]:
    """Decorator that silently ignores messages from unauthorized users."""

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        user = update.effective_user
        if user is None or user.id not in settings.ALLOWED_USER_IDS:
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return  # Silent ignore
        return await func(update, context)

    return wrapper


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_EMPTY_STATE_MESSAGES = {
    EmptyReason.NO_CATEGORIES_EXIST: {
        "en": "There are no affirmation categories yet. Please check back soon.",
        "es": "Todavía no hay categorías de afirmaciones. Vuelve pronto.",
    },
    EmptyReason.NO_CATEGORIES_SELECTED: {
        "en": "You haven't selected any categories. Use /categories to pick some.",
        "es": "No has seleccionado ninguna categoría. Usa /categories para elegir.",
    },
    EmptyReason.NO_CANDIDATES: {
        "en": "No affirmations are available for your categories yet. "
              "Try adding more with /categories.",
        "es": "Aún no hay afirmaciones para tus categorías. "
              "Prueba a añadir más con /categories.",
    },
}

_RETRY_MESSAGE = {
    "en": "Couldn't load your affirmation right now. Please try again later.",
    "es": "No se pudo cargar tu afirmación. Inténtalo de nuevo más tarde.",
}

_CATEGORIES_PROMPT = {
    "en": "Tap a category to include or exclude it from your daily affirmation:",
    "es": "Toca una categoría para incluirla o quitarla de tu afirmación diaria:",
}

_CATEGORIES_LOAD_ERROR = {
    "en": "Couldn't load categories. Please try again.",
    "es": "No se pudieron cargar las categorías. Inténtalo de nuevo.",
}

_TOGGLE_ERROR = {
    "en": "Something went wrong. Please try again.",
    "es": "Algo salió mal. Inténtalo de nuevo.",
}

_CATEGORY_GONE = {
    "en": "That category is no longer available. Here is the current list:",
    "es": "Esa categoría ya no está disponible. Esta es la lista actual:",
}

_WALLPAPER_LABEL = {
    "en": "Wallpaper",
    "es": "Fondo de pantalla",
}


def _user_language(context: ContextTypes.DEFAULT_TYPE) -> str:
    return context.user_data.get("language", settings.DEFAULT_LANGUAGE)


def _engine(context: ContextTypes.DEFAULT_TYPE) -> DailyAffirmationEngine:
    return context.bot_data["engine"]


def _categories_keyboard(
    categories: list[AffirmationCategory],
    selected: list[str],
    language: str,
) -> InlineKeyboardMarkup:
    """One toggle button per category, ✅ marking the selected ones."""
    rows = []
    for category in categories:
        mark = "✅" if category.id in selected else "⬜"
        label = f"{mark} {resolve(category.name, language)}"
        rows.append([InlineKeyboardButton(label, callback_data=f"affcat:{category.id}")])
    return InlineKeyboardMarkup(rows)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — welcome message."""
    await update.message.reply_text(
        "Welcome to *Wellness Affirmations*!\n\n"
        "• Use /affirmation to read today's affirmation\n"
        "• Use /categories to choose the topics you care about\n"
        "• Use /language en|es to switch language\n\n"
        "Type /help for the full command list.",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "*Available commands:*\n"
        "/affirmation — Today's affirmation\n"
        "/categories — Choose affirmation categories\n"
        "/language <code> — Set language (en, es)\n"
        "/help — Show this message",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_affirmation(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /affirmation — show today's affirmation or the right empty state."""
    language = _user_language(context)
    user_id = str(update.effective_user.id)

    try:
        result = await _engine(context).get_daily_affirmation(user_id)
    except StoreUnavailable as exc:
        logger.error("/affirmation store error for user %s: %s", user_id, exc)
        await update.message.reply_text(resolve(_RETRY_MESSAGE, language))
        return

    if not result:
        await update.message.reply_text(
            resolve(_EMPTY_STATE_MESSAGES[result.reason], language)
        )
        return

    affirmation = result.affirmation
    text = f"🌿 _{escape_markdown(resolve(affirmation.text, language), version=2)}_"
    image_url = resolve_url(affirmation.image_urls(), language)
    if image_url:
        label = escape_markdown(resolve(_WALLPAPER_LABEL, language), version=2)
        url = escape_markdown(image_url, version=2, entity_type="text_link")
        text += f"\n\n[{label}]({url})"
    await update.message.reply_text(text, parse_mode="MarkdownV2")


@authorized_only
async def cmd_categories(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /categories — show categories as toggle buttons."""
    language = _user_language(context)
    user_id = str(update.effective_user.id)
    engine = _engine(context)

    try:
        categories = await engine.list_categories()
        prefs = await engine.load_preferences(user_id, categories=categories)
    except StoreUnavailable as exc:
        logger.error("/categories store error for user %s: %s", user_id, exc)
        await update.message.reply_text(resolve(_CATEGORIES_LOAD_ERROR, language))
        return

    if not categories:
        await update.message.reply_text(
            resolve(_EMPTY_STATE_MESSAGES[EmptyReason.NO_CATEGORIES_EXIST], language)
        )
        return

    await update.message.reply_text(
        resolve(_CATEGORIES_PROMPT, language),
        reply_markup=_categories_keyboard(categories, prefs.selected_categories, language),
    )


async def _handle_category_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Handle the inline button tap that toggles a category."""
    query = update.callback_query
    await query.answer()

    # Verify the user is authorized
    user = query.from_user
    if user is None or user.id not in settings.ALLOWED_USER_IDS:
        return

    category_id = query.data.partition(":")[2]
    language = _user_language(context)
    engine = _engine(context)
    user_id = str(user.id)

    try:
        categories = await engine.list_categories()
        if category_id not in {c.id for c in categories}:
            # Button from an old keyboard; the category was removed since
            logger.warning(
                "Ignoring toggle of unknown category %r from user %s", category_id, user_id,
            )
            prefs = await engine.load_preferences(user_id, categories=categories)
            selected = prefs.selected_categories
            stale = True
        else:
            selected = await engine.toggle_category(user_id, category_id)
            stale = False
    except StoreUnavailable as exc:
        logger.error("category toggle error for user %s: %s", user_id, exc)
        await query.edit_message_text(resolve(_TOGGLE_ERROR, language))
        return

    if stale:
        if not categories:
            await query.edit_message_text(
                resolve(_EMPTY_STATE_MESSAGES[EmptyReason.NO_CATEGORIES_EXIST], language)
            )
            return
        await query.edit_message_text(
            resolve(_CATEGORY_GONE, language),
            reply_markup=_categories_keyboard(categories, selected, language),
        )
        return

    await query.edit_message_reply_markup(
        reply_markup=_categories_keyboard(categories, selected, language),
    )


@authorized_only
async def cmd_language(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /language <code> — set the display language."""
    args = context.args
    supported = ", ".join(SUPPORTED_LANGUAGES)
    if not args:
        await update.message.reply_text(
            f"Current language: {_user_language(context)}\n"
            f"Usage: /language <code> ({supported})"
        )
        return

    language = normalize_language(args[0])
    if language not in SUPPORTED_LANGUAGES:
        await update.message.reply_text(f"Unsupported language. Choose one of: {supported}")
        return

    context.user_data["language"] = language
    logger.info("User %s switched language to %s", update.effective_user.id, language)
    await update.message.reply_text(f"Language set to {language}.")


# ---------------------------------------------------------------------------
# Application wiring
# ---------------------------------------------------------------------------


def build_engine() -> DailyAffirmationEngine:
    """Wire the engine to the default SQLite store, UTC clock and random picker."""
    from wellness.adapters.random_picker import RandomPicker
    from wellness.adapters.sqlite_store import SQLiteDocumentStore
    from wellness.adapters.system_clock import SystemClock
    from wellness.core.affirmation_engine import DailyAffirmationEngine

    store = SQLiteDocumentStore()
    return DailyAffirmationEngine(
        categories=store,
        affirmations=store,
        preferences=store,
        clock=SystemClock(),
        picker=RandomPicker(seed=settings.RANDOM_SEED),
    )


def build_app(engine: DailyAffirmationEngine | None = None) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        engine: Daily affirmation engine. Defaults to the SQLite-backed one.
    """
    app = ApplicationBuilder().token(settings.TELEGRAM_BOT_TOKEN).build()

    if engine is None:
        engine = build_engine()

    # Store the engine in bot_data for handler access
    app.bot_data["engine"] = engine

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("affirmation", cmd_affirmation))
    app.add_handler(CommandHandler("categories", cmd_categories))
    app.add_handler(CommandHandler("language", cmd_language))
    app.add_handler(CallbackQueryHandler(_handle_category_callback, pattern=r"^affcat:"))

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting Wellness Affirmations bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
