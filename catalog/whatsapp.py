"""Pre-filled WhatsApp messages and ``wa.me`` links for ordering."""
import random
import string
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from urllib.parse import quote

from django.conf import settings


_ORDER_ID_CHARS = string.ascii_uppercase + string.digits


@dataclass
class OrderDetails:
    order_id: str
    item_name: str
    quantity: int
    total_amount: Decimal
    product_description: str
    customer_name: str = "Customer"
    customer_location: str = "Nigeria"
    delivery_option: str = "Delivery"


def format_naira(amount) -> str:
    value = Decimal(str(amount or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    symbol = getattr(settings, "CURRENCY_SYMBOL", "₦")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def generate_order_id() -> str:
    part1 = "".join(random.choices(_ORDER_ID_CHARS, k=7))
    part2 = "".join(random.choices(_ORDER_ID_CHARS, k=3))
    return f"#MH-{part1}-{part2}"


def generate_order_whatsapp_message(details: OrderDetails) -> str:
    return (
        f"🛍 New Order {details.order_id}\n"
        "\n"
        f"Item: {details.item_name}\n"
        f"Quantity: {details.quantity}\n"
        f"Total Amount: {format_naira(details.total_amount)}\n"
        "\n"
        f"Product Description: {details.product_description}\n"
        "\n"
        "Customer Details:\n"
        f"Name: {details.customer_name}\n"
        f"Location: {details.customer_location}\n"
        f"Delivery Option: {details.delivery_option}\n"
        "\n"
        "Note: For deliveries outside Abuja, payment must be made before delivery."
    )


def generate_product_inquiry_message(product) -> str:
    return (
        "🛍 Product Inquiry\n"
        "\n"
        f"Item: {product.name}\n"
        f"Price: {format_naira(product.price)}\n"
        f"Features: {', '.join(product.features)}\n"
        "\n"
        "I'm interested in this product. Please provide more details and ordering information."
    )


def encode_whatsapp_message(message: str) -> str:
    # Same character set as JavaScript's encodeURIComponent
    return quote(message, safe="-_.!~*'()")


def generate_whatsapp_link(phone_number: str, message: str) -> str:
    digits = "".join(ch for ch in phone_number if ch.isdigit())
    return f"https://wa.me/{digits}?text={encode_whatsapp_message(message)}"


def product_order_link(product, phone_number: Optional[str] = None) -> str:
    """The product's own WhatsApp link, else an inquiry link to the store number."""
    if product.whatsapp_link:
        return product.whatsapp_link
    number = phone_number or getattr(settings, "STORE_WHATSAPP_NUMBER", "")
    return generate_whatsapp_link(number, generate_product_inquiry_message(product))
