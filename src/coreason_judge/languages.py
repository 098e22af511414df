# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_judge

"""Language profiles: how to build and run each supported language in a container."""

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field

from coreason_judge.exceptions import UnsupportedLanguageError

INPUT_FILENAME = "input.txt"
OUTPUT_FILENAME = "output.txt"


class LanguageProfile(BaseModel):
    """Static description of one supported language.

    Attributes:
        id: Language identifier accepted in requests.
        source_extension: Extension of the source file, e.g. ``cpp``.
        source_stem: Basename of the source file without extension.
        container_image: Image the program is built and run in.
        build_and_run_template: Shell template with ``{source}``, ``{input}`` and
            ``{output}`` placeholders. Only the fixed canonical filenames are ever
            substituted into it.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    source_extension: str = Field(min_length=1)
    source_stem: str = "main"
    container_image: str = Field(min_length=1)
    build_and_run_template: str = Field(min_length=1)

    @property
    def source_filename(self) -> str:
        return f"{self.source_stem}.{self.source_extension}"

    def render_command(self) -> list[str]:
        """Returns the argv that builds and runs the program inside the container."""
        script = self.build_and_run_template.format(
            source=self.source_filename,
            input=INPUT_FILENAME,
            output=OUTPUT_FILENAME,
        )
        return ["/bin/sh", "-c", script]


DEFAULT_PROFILES: tuple[LanguageProfile, ...] = (
    LanguageProfile(
        id="c_cpp",
        source_extension="cpp",
        container_image="gcc:13",
        build_and_run_template="g++ -O2 -o main {source} && ./main < {input} > {output}",
    ),
    LanguageProfile(
        id="java",
        source_extension="java",
        # javac requires the public class to match the file name
        source_stem="Main",
        container_image="eclipse-temurin:21-jdk",
        build_and_run_template="javac {source} && java Main < {input} > {output}",
    ),
    LanguageProfile(
        id="python",
        source_extension="py",
        container_image="python:3.12-slim",
        build_and_run_template="python {source} < {input} > {output}",
    ),
    LanguageProfile(
        id="javascript",
        source_extension="js",
        container_image="node:20-slim",
        build_and_run_template="node {source} < {input} > {output}",
    ),
)


class LanguageRegistry:
    """
    Read-only lookup of language profiles by id.

    Built once and never mutated, so concurrent readers need no locking.
    Adding a language is a table edit; nothing downstream branches on the id.
    """

    def __init__(
        self,
        profiles: tuple[LanguageProfile, ...] = DEFAULT_PROFILES,
        image_overrides: Mapping[str, str] | None = None,
    ):
        table: dict[str, LanguageProfile] = {}
        for profile in profiles:
            if profile.id in table:
                raise ValueError(f"Duplicate language profile: {profile.id}")
            table[profile.id] = profile

        for language_id, image in (image_overrides or {}).items():
            if language_id not in table:
                raise ValueError(f"Image override for unknown language: {language_id}")
            table[language_id] = table[language_id].model_copy(update={"container_image": image})

        self._profiles: Mapping[str, LanguageProfile] = MappingProxyType(table)

    def resolve(self, language_id: str) -> LanguageProfile:
        """Returns the profile for ``language_id``.

        Raises:
            UnsupportedLanguageError: If no profile is registered for the id.
        """
        try:
            return self._profiles[language_id]
        except KeyError:
            raise UnsupportedLanguageError(language_id) from None

    def languages(self) -> list[str]:
        return sorted(self._profiles)

    def __contains__(self, language_id: object) -> bool:
        return language_id in self._profiles
