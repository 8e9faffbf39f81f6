"""Closing contact slide on a black background."""

from ..generator.document import DocumentSink, ShapeKind
from ..schema.models import Position
from .base import RenderContext
from .helpers import start_slide, text


def render_contact(document: DocumentSink, context: RenderContext) -> DocumentSink:
    design = context.design
    settings = context.settings
    contact = settings.contact
    margin = design.margin

    start_slide(document, context, background=design.black)
    text(document, context, f"{settings.agency_name}.", margin, 0.3, 2.5, 0.5,
         size=20, bold=True, color=design.white)

    photo = Position(margin, 0.95, 1.8, 2.05)
    document.add_shape(ShapeKind.ROUNDED_RECTANGLE, photo, fill=design.dark_gray,
                       line="#555555", line_width=1)
    text(document, context, "Foto", margin, photo.top + photo.height / 2 - 0.2,
         photo.width, 0.4, size=11, color=design.medium_gray, align="center")

    text(document, context, contact.name, margin, 3.1, 4, 0.3, size=13,
         color=design.white)
    text(document, context, contact.title, margin, 3.4, 4, 0.25,
         color=design.medium_gray)
    text(document, context, settings.agency_name, margin, 3.8, 4, 0.35, size=15,
         bold=True, color=design.white)
    text(document, context, settings.tagline, margin, 4.1, 4, 0.25, size=8,
         color=design.medium_gray)
    text(document, context, f"{contact.company}\n{contact.address}\n{contact.city}",
         margin, 4.5, 3.4, 0.7, size=9, color=design.white)
    text(document, context, f"E-Mail: {contact.email}\nTel.: {contact.phone}",
         margin + 3.5, 4.5, 3.6, 0.5, size=9, color=design.white)

    document.add_shape(ShapeKind.RECTANGLE, Position(6.8, 0.4, 2.4, 2.4),
                       fill=context.primary, rotation=45)
    document.add_shape(ShapeKind.RECTANGLE, Position(7.5, 1.3, 1.9, 1.9),
                       fill=context.secondary, rotation=45)
    return document
