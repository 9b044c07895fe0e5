import io

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from errors import ValidationError


def build_invoice(order, vat_rate=0.2):
    """Render a menu order as an A4 PDF and return it as a BytesIO."""
    if order.menu_details is None:
        raise ValidationError("Invoices are only available for menu orders")
    details = order.menu_details

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    y = height - 50

    # Title
    pdf.setFont("Helvetica-Bold", 18)
    pdf.drawString(200, y, "VG Foods Invoice")
    y -= 40

    # Order info
    pdf.setFont("Helvetica", 12)
    pdf.drawString(50, y, f"Order ID: {order.id}")
    y -= 20
    pdf.drawString(50, y, f"Date: {order.created_at}")
    y -= 20
    pdf.drawString(50, y, f"Customer: {order.user_name}")
    y -= 20
    pdf.drawString(50, y, f"Payment Method: {(details.payment_method or '').upper()}")
    y -= 20
    pdf.drawString(50, y, f"Delivery Address: {details.shipping_address}")
    y -= 30

    # Table header
    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(50, y, "Item")
    pdf.drawString(260, y, "Qty")
    pdf.drawString(310, y, "Price")
    pdf.drawString(390, y, "Total")
    y -= 20

    pdf.setFont("Helvetica", 11)

    subtotal = 0
    for item in details.items:
        item_total = item["price"] * item["quantity"]
        subtotal += item_total

        pdf.drawString(50, y, item["name"])
        pdf.drawString(260, y, str(item["quantity"]))
        pdf.drawString(310, y, f"£{item['price']:.2f}")
        pdf.drawString(390, y, f"£{item_total:.2f}")
        y -= 20

        if y < 100:
            pdf.showPage()
            y = height - 50

    # the stored total already has any discount and VAT applied
    total = details.total_amount
    vat = round(total - total / (1 + vat_rate), 2)

    y -= 20
    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(300, y, "Subtotal:")
    pdf.drawString(390, y, f"£{subtotal:.2f}")
    y -= 20
    pdf.drawString(300, y, f"VAT ({vat_rate:.0%}):")
    pdf.drawString(390, y, f"£{vat:.2f}")
    y -= 20
    pdf.drawString(300, y, "Total:")
    pdf.drawString(390, y, f"£{total:.2f}")

    pdf.showPage()
    pdf.save()
    buffer.seek(0)
    return buffer
