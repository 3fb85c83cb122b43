"""Macro body lexer - Tokenizes the text between a macro call's delimiters."""

from .lexer import Lexer, Token, TokenType, tokenize, is_ident_start, is_ident_continue

__all__ = ['Lexer', 'Token', 'TokenType', 'tokenize', 'is_ident_start', 'is_ident_continue']
