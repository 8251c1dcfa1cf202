"""
Test application factory and configuration.
"""

import pytest
from app import create_app


class TestAppFactory:
    """Test Flask application factory."""

    def test_create_app_development(self):
        """Test app creation with development config."""
        app = create_app('development')
        assert app is not None
        assert app.config['DEBUG'] is True
        assert app.config['TESTING'] is False

    def test_create_app_test(self):
        """Test app creation with test config."""
        app = create_app('test')
        assert app is not None
        assert app.config['TESTING'] is True
        assert app.config['WTF_CSRF_ENABLED'] is False

    def test_create_app_default(self):
        """Test app creation with default config."""
        app = create_app()
        assert app is not None

    def test_app_has_blueprints(self):
        """Test that all blueprints are registered."""
        app = create_app('test')
        blueprint_names = list(app.blueprints.keys())

        assert 'auth' in blueprint_names
        assert 'api' in blueprint_names

    def test_app_has_extensions(self):
        """Test that extensions are initialized."""
        app = create_app('test')
        assert hasattr(app, 'login_manager')
        assert 'csrf' in app.extensions


class TestAppConfiguration:
    """Test application configuration."""

    def test_secret_key_set(self):
        """Test that secret key is configured."""
        app = create_app('test')
        assert app.config['SECRET_KEY']

    def test_database_settings(self):
        """Test that database path and lock timeout are configured."""
        app = create_app('test')
        assert 'DATABASE_PATH' in app.config
        assert app.config['DATABASE_TIMEOUT'] > 0

    def test_app_name_set(self):
        """Test that app name is configured."""
        app = create_app('test')
        assert app.config.get('APP_NAME') == 'ResourceHub'

    def test_production_requires_secret_key(self, monkeypatch):
        """Production config refuses to start without a strong SECRET_KEY."""
        from config import ProductionConfig

        monkeypatch.delenv('SECRET_KEY', raising=False)
        with pytest.raises(ValueError):
            ProductionConfig.validate()

        monkeypatch.setenv('SECRET_KEY', 'short')
        with pytest.raises(ValueError):
            ProductionConfig.validate()

    def test_production_accepts_valid_environment(self, monkeypatch):
        """Production config validates with SECRET_KEY and DATABASE_PATH set."""
        from config import ProductionConfig

        monkeypatch.setenv('SECRET_KEY', 'x' * 40)
        monkeypatch.setenv('DATABASE_PATH', '/tmp/resourcehub.db')
        ProductionConfig.validate()


class TestCLICommands:
    """Test CLI command registration."""

    def test_commands_registered(self):
        """init-db, create-user and seed-demo are available."""
        app = create_app('test')
        commands = app.cli.list_commands(None)

        assert 'init-db' in commands
        assert 'create-user' in commands
        assert 'seed-demo' in commands

    def test_create_user_command(self, app):
        """create-user inserts a user with the chosen role."""
        from models.user import get_user_by_email

        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-user', 'nova@universidade.edu', 'Nova Docente',
            '--role', 'faculty', '--password', 'segredo123'
        ])

        assert result.exit_code == 0, result.output
        assert 'User created successfully' in result.output

        with app.app_context():
            user = get_user_by_email('nova@universidade.edu')
        assert user['role'] == 'faculty'
        assert user['name'] == 'Nova Docente'

    def test_seed_demo_command(self, app):
        """seed-demo inserts resources and a package."""
        from models.resource import get_all_resources
        from models.package import get_all_packages, get_package_members

        runner = app.test_cli_runner()
        result = runner.invoke(args=['seed-demo'])
        assert result.exit_code == 0, result.output

        with app.app_context():
            assert len(get_all_resources()) == 5
            packages = get_all_packages()
            assert len(packages) == 1
            assert len(get_package_members(packages[0]['id'])) == 2


class TestHealthEndpoints:
    """Test unauthenticated endpoints."""

    def test_health(self, client):
        response = client.get('/api/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'

    def test_csrf_token(self, client):
        response = client.get('/api/csrf-token')
        assert response.status_code == 200
        assert response.get_json()['success'] is True

    def test_unknown_route_returns_json_404(self, client):
        response = client.get('/api/does-not-exist')
        assert response.status_code == 404
        assert response.get_json()['success'] is False
