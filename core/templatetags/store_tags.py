from django import template

from catalog.media import get_youtube_thumbnail
from catalog.whatsapp import format_naira


register = template.Library()


@register.filter
def naira(amount):
    if amount in (None, ""):
        return ""
    return format_naira(amount)


@register.filter
def youtube_thumbnail(url):
    return get_youtube_thumbnail(url)
