"""Dual-model extraction of SOAP notes and lab values from handwritten medical documents."""

__version__ = "0.1.0"
