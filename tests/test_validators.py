"""
Tests for input validation utilities.
"""

from utils.validators import (
    validate_email,
    validate_non_negative_int,
    validate_password,
    sanitize_input
)


class TestValidateEmail:
    """Tests for email validation."""

    def test_valid_email(self):
        """Test valid email formats."""
        assert validate_email('aluno@universidade.edu') is True
        assert validate_email('maria.silva@fisica.universidade.edu.br') is True
        assert validate_email('user+tag@example.co.uk') is True

    def test_invalid_email(self):
        """Test invalid email formats."""
        assert validate_email('') is False
        assert validate_email(None) is False
        assert validate_email('invalid') is False
        assert validate_email('@universidade.edu') is False
        assert validate_email('aluno@') is False
        assert validate_email('aluno@universidade') is False


class TestValidateNonNegativeInt:
    """Tests for quantity/setting validation."""

    def test_valid_values(self):
        assert validate_non_negative_int(0) is True
        assert validate_non_negative_int(3) is True

    def test_invalid_values(self):
        assert validate_non_negative_int(-1) is False
        assert validate_non_negative_int(True) is False
        assert validate_non_negative_int('3') is False
        assert validate_non_negative_int(1.5) is False
        assert validate_non_negative_int(None) is False


class TestValidatePassword:
    """Tests for password validation."""

    def test_valid_password(self):
        assert validate_password('segredo123') == (True, '')

    def test_short_password(self):
        is_valid, error = validate_password('abc')
        assert is_valid is False
        assert '6' in error

    def test_custom_min_length(self):
        assert validate_password('abcdefgh', min_length=10)[0] is False

    def test_empty_password(self):
        is_valid, error = validate_password('')
        assert is_valid is False
        assert error


class TestSanitizeInput:
    """Tests for input sanitization."""

    def test_trims_whitespace(self):
        assert sanitize_input('  Física  ') == 'Física'

    def test_truncates(self):
        assert sanitize_input('abcdef', max_length=3) == 'abc'

    def test_empty_values(self):
        assert sanitize_input('') == ''
        assert sanitize_input(None) == ''
