"""
Static site content: category titles, contact details and outbound links.
"""
from typing import Dict, Optional
from urllib.parse import quote

WHATSAPP_NUMBER = "541125192502"
ADDRESS = "Maipu 1270, Grand Bourg, Buenos Aires, Argentina"

CATEGORIES: Dict[str, Dict[str, str]] = {
    "puertas": {
        "title": "Puertas",
        "description": "Descubre nuestra amplia selección de puertas de hierro forjado, diseñadas para brindar seguridad y elegancia a tu hogar.",
    },
    "portones": {
        "title": "Portones",
        "description": "Portones automáticos y manuales de alta calidad, perfectos para proteger tu propiedad con estilo y funcionalidad.",
    },
    "gondolas": {
        "title": "Góndolas",
        "description": "Soluciones de exhibición profesionales para comercios, diseñadas para maximizar el espacio y la presentación de productos.",
    },
    "estanterias": {
        "title": "Estanterías",
        "description": "Estanterías resistentes y versátiles para organizar espacios industriales, comerciales y residenciales.",
    },
    "rejas": {
        "title": "Rejas",
        "description": "Rejas de seguridad personalizadas que combinan protección efectiva con diseños atractivos.",
    },
    "escaleras": {
        "title": "Escaleras",
        "description": "Escaleras de hierro forjado y acero, desde diseños clásicos hasta modernos, adaptadas a cualquier espacio.",
    },
    "muebles": {
        "title": "Muebles",
        "description": "Muebles de hierro únicos y duraderos que aportan carácter y funcionalidad a cualquier ambiente.",
    },
    "accesorios": {
        "title": "Accesorios",
        "description": "Complementos y accesorios de herrería para completar y personalizar tus proyectos.",
    },
}

FALLBACK_CATEGORY = {
    "title": "Categoría",
    "description": "Explora nuestra selección de productos de alta calidad.",
}


def category_info(slug: str) -> Dict[str, str]:
    info = CATEGORIES.get(slug, FALLBACK_CATEGORY)
    return {"slug": slug, "title": info["title"], "description": info["description"]}


def inquiry_link(product_name: Optional[str] = None) -> str:
    """WhatsApp chat link, prefilled with an inquiry when a product is named."""
    url = f"https://wa.me/{WHATSAPP_NUMBER}"
    if product_name:
        url += "?text=" + quote(f"Hola, me interesa el producto: {product_name}", safe="")
    return url


LOCATION = {
    "address": ADDRESS,
    "phone": f"+{WHATSAPP_NUMBER}",
    "whatsapp": inquiry_link(),
    "hours": [
        "Lunes a Viernes: 8:00 - 18:00",
        "Sábados: 8:00 - 13:00",
        "Domingos: Cerrado",
    ],
    "maps_url": "https://www.google.com/maps/search/?api=1&query=" + quote(ADDRESS, safe=""),
    "directions_url": "https://www.google.com/maps/dir/?api=1&destination=" + quote(ADDRESS, safe=""),
}
