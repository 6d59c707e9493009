import re
from decimal import Decimal
from urllib.parse import unquote

from catalog.whatsapp import (
    OrderDetails,
    encode_whatsapp_message,
    format_naira,
    generate_order_id,
    generate_order_whatsapp_message,
    generate_whatsapp_link,
    product_order_link,
)


def test_format_naira():
    assert format_naira(Decimal("25000")) == "₦25,000.00"
    assert format_naira(1234.5) == "₦1,234.50"
    assert format_naira(None) == "₦0.00"


def test_order_id_shape():
    assert re.match(r"^#MH-[A-Z0-9]{7}-[A-Z0-9]{3}$", generate_order_id())


def test_order_message_lists_details():
    message = generate_order_whatsapp_message(
        OrderDetails(
            order_id="#MH-ABC1234-XYZ",
            item_name="Oraimo FreePods 4",
            quantity=2,
            total_amount=Decimal("50000"),
            product_description="ANC earbuds",
        )
    )
    assert "New Order #MH-ABC1234-XYZ" in message
    assert "Quantity: 2" in message
    assert "Total Amount: ₦50,000.00" in message
    assert "Name: Customer" in message


def test_encode_matches_encode_uri_component():
    assert encode_whatsapp_message("Hi there! (x) & y") == "Hi%20there!%20(x)%20%26%20y"


def test_link_strips_non_digits():
    link = generate_whatsapp_link("+234 801-234-5678", "Hello")
    assert link == "https://wa.me/2348012345678?text=Hello"


def test_product_order_link_prefers_own_link(make_product):
    product = make_product(whatsapp_link="https://wa.me/2349000000000")
    assert product_order_link(product) == "https://wa.me/2349000000000"


def test_product_order_link_falls_back_to_inquiry(settings, make_product):
    settings.STORE_WHATSAPP_NUMBER = "2348011111111"
    product = make_product(whatsapp_link="")
    link = product_order_link(product)
    assert link.startswith("https://wa.me/2348011111111?text=")
    text = unquote(link.split("?text=", 1)[1])
    assert "Item: Oraimo FreePods 4" in text
    assert "Price: ₦25,000.00" in text
    assert "Features: ANC, 35h battery" in text
