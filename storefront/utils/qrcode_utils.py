import qrcode
import base64
from io import BytesIO

from storefront.config import PIX_QR_BOX_SIZE, PIX_QR_BORDER

def generate_qr_code(data: str, box_size: int = PIX_QR_BOX_SIZE, border: int = PIX_QR_BORDER) -> str:
    """
    Génère un QR code à partir du payload PIX et le retourne en data URI PNG base64.

    Args:
        data: La chaîne à encoder (payload QR du paiement PIX)
        box_size: La taille de chaque module du QR code
        border: La taille de la bordure (en modules)

    Returns:
        "data:image/png;base64,<...>"
    """
    if not data:
        raise ValueError("data is required")
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffered = BytesIO()
    img.save(buffered, format="PNG")
    img_str = base64.b64encode(buffered.getvalue()).decode("utf-8")

    return f"data:image/png;base64,{img_str}"
