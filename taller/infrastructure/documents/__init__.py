"""Tax document builders."""

from taller.infrastructure.documents.dte_xml_builder import DteXmlBuilder

__all__ = ["DteXmlBuilder"]
