import pytest
from pydantic import ValidationError

from coreason_judge.exceptions import RequestValidationError, UnsupportedLanguageError
from coreason_judge.languages import DEFAULT_PROFILES, LanguageProfile, LanguageRegistry


@pytest.mark.parametrize("language_id", ["c_cpp", "java", "python", "javascript"])
def test_resolve_supported_languages(registry: LanguageRegistry, language_id: str) -> None:
    profile = registry.resolve(language_id)
    assert profile.id == language_id
    assert profile.container_image
    assert profile.source_extension


def test_resolve_unknown_language(registry: LanguageRegistry) -> None:
    with pytest.raises(UnsupportedLanguageError, match="Unsupported language: cobol") as exc_info:
        registry.resolve("cobol")
    assert isinstance(exc_info.value, RequestValidationError)
    assert exc_info.value.language_id == "cobol"


def test_languages_listing(registry: LanguageRegistry) -> None:
    assert registry.languages() == ["c_cpp", "java", "javascript", "python"]
    assert "python" in registry
    assert "ruby" not in registry


def test_render_command_uses_canonical_filenames(registry: LanguageRegistry) -> None:
    assert registry.resolve("python").render_command() == [
        "/bin/sh",
        "-c",
        "python main.py < input.txt > output.txt",
    ]
    assert registry.resolve("c_cpp").render_command()[2] == (
        "g++ -O2 -o main main.cpp && ./main < input.txt > output.txt"
    )


def test_java_source_matches_public_class(registry: LanguageRegistry) -> None:
    profile = registry.resolve("java")
    assert profile.source_filename == "Main.java"
    assert "java Main" in profile.render_command()[2]


def test_image_override(registry: LanguageRegistry) -> None:
    overridden = LanguageRegistry(image_overrides={"python": "pypy:3.10"})
    assert overridden.resolve("python").container_image == "pypy:3.10"
    # Defaults are untouched
    assert registry.resolve("python").container_image == "python:3.12-slim"


def test_image_override_unknown_language() -> None:
    with pytest.raises(ValueError, match="unknown language"):
        LanguageRegistry(image_overrides={"cobol": "cobol:latest"})


def test_duplicate_profiles_rejected() -> None:
    with pytest.raises(ValueError, match="Duplicate"):
        LanguageRegistry(profiles=DEFAULT_PROFILES + (DEFAULT_PROFILES[0],))


def test_profiles_are_immutable(registry: LanguageRegistry) -> None:
    profile = registry.resolve("python")
    with pytest.raises(ValidationError):
        profile.container_image = "evil:latest"  # type: ignore[misc]


def test_custom_profile_table() -> None:
    ruby = LanguageProfile(
        id="ruby",
        source_extension="rb",
        container_image="ruby:3.3-slim",
        build_and_run_template="ruby {source} < {input} > {output}",
    )
    registry = LanguageRegistry(profiles=(ruby,))
    assert registry.languages() == ["ruby"]
    assert registry.resolve("ruby").render_command()[2] == "ruby main.rb < input.txt > output.txt"
