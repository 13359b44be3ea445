"""
Unit tests for credential resolution and option handling.

Credentials arrive in several shapes; every supported shape should resolve
to the same provider-ready mapping.
"""

import pytest

from src.core.storage.credentials import (
    CredentialResolver,
    load_credentials,
    render_template,
    resolve_credentials,
)
from src.core.storage.errors import ConfigurationError
from src.core.storage.options import Computed, Literal, StorageOptions, as_option, resolve_option


CREDENTIALS_YAML = """\
provider: softlayer
auth_url: https://s3.dal05.objectstorage.softlayer.net
username: test-user
password: test-secret
"""

EXPECTED = {
    "provider": "softlayer",
    "auth_url": "https://s3.dal05.objectstorage.softlayer.net",
    "username": "test-user",
    "password": "test-secret",
}


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "storage.yml"
    path.write_text(CREDENTIALS_YAML)
    return path


# ---------------------------------------------------------------------------
# Source Shapes
# ---------------------------------------------------------------------------

class TestCredentialSources:
    """Every supported source shape resolves to the same mapping."""

    def test_mapping_is_used_as_is(self):
        assert resolve_credentials(dict(EXPECTED)) == EXPECTED

    def test_path_string_is_loaded(self, credentials_file):
        assert resolve_credentials(str(credentials_file)) == EXPECTED

    def test_pathlib_path_is_loaded(self, credentials_file):
        assert resolve_credentials(credentials_file) == EXPECTED

    def test_open_text_file_is_loaded(self, credentials_file):
        with open(credentials_file) as f:
            assert resolve_credentials(f) == EXPECTED

    def test_open_binary_file_is_loaded(self, credentials_file):
        with open(credentials_file, "rb") as f:
            assert resolve_credentials(f) == EXPECTED

    def test_callable_receives_context(self):
        seen = []

        def source(context):
            seen.append(context)
            return dict(EXPECTED)

        assert resolve_credentials(source, context="attachment") == EXPECTED
        assert seen == ["attachment"]

    def test_zero_argument_callable_returning_path(self, credentials_file):
        assert resolve_credentials(lambda: str(credentials_file)) == EXPECTED

    @pytest.mark.parametrize("source", [42, 3.5, None, ["provider"]])
    def test_unsupported_shape_is_rejected(self, source):
        with pytest.raises(ConfigurationError, match="not a path, file, mapping, or callable"):
            resolve_credentials(source)

    def test_callable_returning_callable_is_rejected(self):
        with pytest.raises(ConfigurationError):
            load_credentials(lambda: (lambda: EXPECTED))

    def test_missing_file_is_a_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            resolve_credentials(tmp_path / "missing.yml")

    def test_non_mapping_yaml_is_rejected(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            resolve_credentials(path)

    def test_keys_are_normalized_to_strings(self):
        assert resolve_credentials({1: "one"}) == {"1": "one"}


# ---------------------------------------------------------------------------
# Templating and Environments
# ---------------------------------------------------------------------------

class TestTemplating:
    """Credential files can pull secrets from the environment."""

    def test_placeholders_are_filled_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OBJSTOR_PASSWORD", "from-env")
        path = tmp_path / "storage.yml"
        path.write_text("password: ${OBJSTOR_PASSWORD}\n")

        assert resolve_credentials(path) == {"password": "from-env"}

    def test_unknown_placeholders_are_left_alone(self):
        assert render_template("user: ${NOPE}", {}) == "user: ${NOPE}"


class TestEnvironmentOverride:
    """A block named after the active environment wins."""

    def test_environment_block_is_hoisted(self, tmp_path):
        path = tmp_path / "storage.yml"
        path.write_text(
            "development:\n"
            "  provider: softlayer\n"
            "  username: dev\n"
            "production:\n"
            "  provider: softlayer\n"
            "  username: prod\n"
        )

        assert resolve_credentials(path, environment="production") == {
            "provider": "softlayer",
            "username": "prod",
        }

    def test_environment_block_equals_sub_mapping_exactly(self):
        raw = {"test": dict(EXPECTED), "provider": "other"}

        assert resolve_credentials(raw, environment="test") == EXPECTED

    def test_whole_mapping_used_without_matching_block(self):
        raw = {"development": {"username": "dev"}, "provider": "softlayer"}

        assert resolve_credentials(raw, environment="production") == raw

    def test_scalar_value_named_like_environment_is_not_hoisted(self):
        raw = {"production": "yes", "provider": "softlayer"}

        assert resolve_credentials(raw, environment="production") == raw


class TestCredentialResolver:
    """The resolver computes once and caches."""

    def test_source_is_only_evaluated_once(self):
        calls = []

        def source():
            calls.append(1)
            return dict(EXPECTED)

        resolver = CredentialResolver(source, environment="test")

        assert resolver.resolve() == EXPECTED
        assert resolver.resolve() == EXPECTED
        assert len(calls) == 1

    def test_errors_surface_at_resolution_time(self):
        resolver = CredentialResolver(42)

        with pytest.raises(ConfigurationError):
            resolver.resolve()


# ---------------------------------------------------------------------------
# Option Values
# ---------------------------------------------------------------------------

class TestOptions:
    """Plain values and callables are normalized into Literal / Computed."""

    def test_plain_values_become_literals(self):
        assert as_option("attachments") == Literal("attachments")

    def test_callables_become_computed(self):
        option = as_option(lambda attachment: f"bucket-{attachment}")

        assert isinstance(option, Computed)
        assert resolve_option(option, "7") == "bucket-7"

    def test_existing_options_pass_through(self):
        option = Literal("x")
        assert as_option(option) is option

    def test_zero_argument_callable_is_supported(self):
        assert resolve_option(as_option(lambda: "fixed"), "ignored") == "fixed"

    def test_required_options_are_enforced(self):
        with pytest.raises(ConfigurationError, match="directory"):
            StorageOptions(credentials={}, directory=None)

    def test_public_defaults_to_true(self):
        options = StorageOptions(credentials={}, directory="d")
        assert options.is_public("original") is True

    def test_public_mapping_is_per_style(self):
        options = StorageOptions(
            credentials={},
            directory="d",
            public={"original": False, "thumb": True},
        )

        assert options.is_public("original") is False
        assert options.is_public("thumb") is True

    def test_public_mapping_without_style_falls_through(self):
        options = StorageOptions(credentials={}, directory="d", public={"thumb": False})
        assert options.is_public("original") is True
