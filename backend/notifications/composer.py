"""
Email content for subscriber notifications.

Builds subject, plain text and HTML bodies for the three events the site
announces: a new subscriber, a new article or activity, and a new magazine.
Nothing here performs I/O; dates are always shown in Chile local time.
"""

import re
import unicodedata
from datetime import date, datetime
from html import escape
from typing import Any

from models.content import SITE_TIMEZONE, PendingArticle, PendingMagazine
from models.notification import EmailPayload
from shared.settings import NotificationSettings

SITE_NAME = "Diván Japonés"

MONTHS_ES = [
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
]


def format_long_date(value: date | datetime) -> str:
    """Format a date as '1 de marzo de 2025' in Chile local time."""
    if isinstance(value, datetime):
        value = value.astimezone(SITE_TIMEZONE).date()
    return f"{value.day} de {MONTHS_ES[value.month - 1]} de {value.year}"


def format_date_time(value: datetime) -> str:
    """Format a timestamp as '1 de marzo de 2025, 17:00' in Chile local time."""
    local = value.astimezone(SITE_TIMEZONE)
    return f"{format_long_date(local.date())}, {local:%H:%M}"


def slugify(title: str) -> str:
    """
    Derive a URL slug from a title.

    Lower-cases, strips diacritics and punctuation, and joins words with hyphens.
    'Hola, Mundo!' -> 'hola-mundo'
    """
    decomposed = unicodedata.normalize("NFD", title)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    slug = re.sub(r"[^\w\s-]", "", stripped.lower())
    slug = re.sub(r"\s+", "-", slug.strip())
    return re.sub(r"-{2,}", "-", slug).strip("-")


def article_slug(article: PendingArticle) -> str:
    """Stored slug, else one derived from the title, else the raw id."""
    if article.slug:
        return article.slug
    return slugify(article.title or "") or str(article.id)


def _base_url(base_url: str | None) -> str:
    if base_url is None:
        base_url = NotificationSettings.from_env().frontend_base_url
    return base_url.rstrip("/")


# ---------------------------------------------------------------------------
# Welcome
# ---------------------------------------------------------------------------


def compose_welcome(email: str, base_url: str | None = None) -> EmailPayload:
    """Welcome email for a single new subscriber."""
    site_url = _base_url(base_url)
    subject = f"¡Te uniste a {SITE_NAME}!"

    text = f"""Hola,

Gracias por suscribirte al newsletter de {SITE_NAME}. Desde ahora recibirás nuestras nuevas publicaciones, actividades y revistas.

Visítanos en {site_url}

Si no esperabas este correo ({email}), ignóralo y no recibirás más mensajes."""

    html = f"""
    <div style="font-family: Arial, sans-serif; color: #0f0f0f; max-width: 520px; margin: 0 auto; padding: 24px; background: #ffffff; border: 1px solid #e6e6e6; border-radius: 10px;">
      <div style="text-align: center; margin-bottom: 16px;">
        <div style="font-size: 14px; letter-spacing: 1px; text-transform: uppercase; color: #7a7a7a;">Bienvenido</div>
        <div style="font-size: 24px; font-weight: 700; margin-top: 6px;">{SITE_NAME}</div>
      </div>
      <p style="font-size: 16px; line-height: 1.6; margin: 0 0 12px;">¡Gracias por unirte! Desde ahora recibirás nuestras nuevas publicaciones, actividades y revistas.</p>
      <p style="font-size: 15px; line-height: 1.6; margin: 0 0 16px;">Si en algún momento deseas dejar de recibir correos, responde con "unsubscribe".</p>
      <div style="text-align: center; margin: 22px 0;">
        <a href="{escape(site_url)}" style="display: inline-block; padding: 12px 22px; background: #0f172a; color: #ffffff; text-decoration: none; border-radius: 999px; font-weight: 600;">Visitar {SITE_NAME}</a>
      </div>
      <p style="font-size: 13px; line-height: 1.5; color: #606060; margin: 0;">Si no esperabas este mensaje ({escape(email)}), ignóralo y no recibirás más correos.</p>
    </div>
"""

    return EmailPayload(subject=subject, text=text, html=html)


# ---------------------------------------------------------------------------
# Articles and activities
# ---------------------------------------------------------------------------


def _prepare_article_data(article: PendingArticle, base_url: str) -> dict[str, Any]:
    """
    Extract and format everything the article templates need.

    Args:
        article: Normalized article row
        base_url: Public site base URL

    Returns:
        Dict with display-ready fields
    """
    is_activity = article.activity
    title = article.title or "Nueva publicación"

    lines = [f"Título: {title}"]
    if article.category:
        lines.append(f"Categoría: {article.category}")

    if is_activity:
        if article.location:
            lines.append(f"Lugar: {article.location}")
        if article.scheduled_at:
            lines.append(f"Fecha: {format_date_time(article.scheduled_at)}")
        if article.price:
            lines.append(f"Valor: {article.price}")
    elif article.published_at:
        lines.append(f"Publicada: {format_long_date(article.published_at)}")

    return {
        "is_activity": is_activity,
        "title": title,
        "kind": "una nueva actividad" if is_activity else "una nueva publicación",
        "lines": lines,
        "excerpt": article.excerpt,
        "image_url": article.image_url,
        "url": f"{base_url}/articulo/{article_slug(article)}",
    }


def compose_article(article: PendingArticle, base_url: str | None = None) -> EmailPayload:
    """Broadcast email announcing a new article or activity."""
    data = _prepare_article_data(article, _base_url(base_url))

    if data["is_activity"]:
        subject = f"Nueva actividad: {data['title']}"
    else:
        subject = f"Nueva publicación: {data['title']}"

    return EmailPayload(
        subject=subject,
        text=_build_article_text(data),
        html=_build_article_html(data),
    )


def _build_article_text(data: dict[str, Any]) -> str:
    text = f"""Hola,

Tenemos {data['kind']} para ti.

"""
    text += "\n".join(data["lines"]) + "\n"

    if data["excerpt"]:
        text += f"\n{data['excerpt']}\n"

    text += f"\nLéela completa en {SITE_NAME}: {data['url']}\n"
    return text


def _build_article_html(data: dict[str, Any]) -> str:
    html = """
    <div style="font-family: Arial, sans-serif; color: #0f0f0f; max-width: 560px; margin: 0 auto; padding: 24px;">
"""

    if data["image_url"]:
        html += f"""
      <img src="{escape(data['image_url'])}" alt="{escape(data['title'])}" style="width: 100%; border-radius: 8px; margin-bottom: 16px;">
"""

    html += f"""
      <p>Hola,</p>
      <p>Tenemos {data['kind']} para ti.</p>
      <ul>
"""
    for line in data["lines"]:
        html += f"        <li>{escape(line)}</li>\n"
    html += "      </ul>\n"

    if data["excerpt"]:
        html += f"""
      <p style="color: #374151; line-height: 1.6;">{escape(data['excerpt'])}</p>
"""

    html += f"""
      <p><a href="{escape(data['url'])}" style="color: #0f172a; font-weight: 600;">Léela completa en {SITE_NAME} →</a></p>
    </div>
"""
    return html


# ---------------------------------------------------------------------------
# Magazines
# ---------------------------------------------------------------------------


def _prepare_magazine_data(magazine: PendingMagazine, base_url: str) -> dict[str, Any]:
    lines = []
    if magazine.title:
        lines.append(f"Título: {magazine.title}")
    if magazine.description:
        lines.append(f"Descripción: {magazine.description}")
    if magazine.release_date:
        lines.append(f"Fecha de lanzamiento: {format_long_date(magazine.release_date)}")

    return {
        "title": magazine.title or "Edición disponible",
        "lines": lines,
        "cover_image": magazine.cover_image,
        "url": f"{base_url}/revista/{magazine.id}",
    }


def compose_magazine(
    magazine: PendingMagazine, base_url: str | None = None
) -> EmailPayload:
    """Broadcast email announcing a new magazine issue."""
    data = _prepare_magazine_data(magazine, _base_url(base_url))

    text = f"Hola,\n\nYa está disponible una nueva revista en {SITE_NAME}.\n"
    if data["lines"]:
        text += "\n" + "\n".join(data["lines"]) + "\n"
    text += f"\nExplora la nueva edición: {data['url']}\n"

    html = """
    <div style="font-family: Arial, sans-serif; color: #0f0f0f; max-width: 560px; margin: 0 auto; padding: 24px;">
"""
    if data["cover_image"]:
        html += f"""
      <img src="{escape(data['cover_image'])}" alt="{escape(data['title'])}" style="max-width: 240px; display: block; margin: 0 auto 16px;">
"""
    html += f"""
      <p>Hola,</p>
      <p>Ya está disponible una nueva revista en {SITE_NAME}.</p>
"""
    if data["lines"]:
        html += "      <ul>\n"
        for line in data["lines"]:
            html += f"        <li>{escape(line)}</li>\n"
        html += "      </ul>\n"
    html += f"""
      <p><a href="{escape(data['url'])}" style="color: #0f172a; font-weight: 600;">Explora la nueva edición →</a></p>
    </div>
"""

    return EmailPayload(
        subject=f"Nueva revista: {data['title']}",
        text=text,
        html=html,
    )
