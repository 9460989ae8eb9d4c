"""
Database Models
Import all models here so their tables are registered on the metadata
"""

from certissuer.models.template import CertificateTemplate, TemplateFieldRow
from certissuer.models.certificate import Certificate

__all__ = [
    "CertificateTemplate",
    "TemplateFieldRow",
    "Certificate",
]
