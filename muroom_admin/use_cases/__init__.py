"""Application use cases for owner and terms workflows."""

from .owners import GenerateNicknameUseCase, OwnerRegistration, RegisterOwnerUseCase
from .terms import CreateTermsUseCase, TargetRole, TermsDraft, TermsType, strip_html

__all__ = [
    "GenerateNicknameUseCase",
    "OwnerRegistration",
    "RegisterOwnerUseCase",
    "CreateTermsUseCase",
    "TargetRole",
    "TermsDraft",
    "TermsType",
    "strip_html",
]
