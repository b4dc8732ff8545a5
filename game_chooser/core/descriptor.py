#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Game Chooser - game descriptor parsing

A descriptor is the XML document that defines one playable game. Only the header is
read here; the full game definition is loaded later by the engine.

    <game>
      <info name="Global War" version="1.0"/>
      <triplea minimumVersion="1.8"/>
      <playerList>
        <player name="Germans"/>
      </playerList>
    </game>

Failures map onto three exception types (see ``exceptions``):

- EngineVersionError: the game needs a newer engine than ENGINE_VERSION.
- DescriptorParseError: the XML is not well-formed; carries line and column.
- DescriptorError: anything else (wrong root, missing name, unreadable URI, ...).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Tuple

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET

from ..exceptions import DescriptorError, DescriptorParseError, EngineVersionError
from ..version import ENGINE_VERSION, is_engine_compatible
from .resources import open_uri

logger = logging.getLogger(__name__)

ROOT_TAG = "game"


@dataclass(frozen=True)
class GameDescriptor:
    name: str
    uri: str
    version: Optional[str] = None
    minimum_engine_version: Optional[str] = None
    players: Tuple[str, ...] = ()


class DescriptorParser(Protocol):
    def parse(self, uri: str) -> GameDescriptor: ...


def _strip(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class XmlDescriptorParser:
    """Parses descriptor headers with defusedxml."""

    def __init__(
        self,
        engine_version: str = ENGINE_VERSION,
        reader: Callable[[str], bytes] = open_uri,
    ) -> None:
        self.engine_version = engine_version
        self._reader = reader

    def parse(self, uri: str) -> GameDescriptor:
        try:
            payload = self._reader(uri)
        except (OSError, ValueError) as exc:
            raise DescriptorError(f"Could not read descriptor: {exc}", uri=uri) from exc

        try:
            root = ET.fromstring(payload)
        except ET.ParseError as exc:
            line, column = getattr(exc, "position", (None, None))
            raise DescriptorParseError(f"Malformed descriptor: {exc}", uri=uri, line=line, column=column) from exc
        except DefusedXmlException as exc:
            raise DescriptorError(f"Forbidden XML construct: {exc}", uri=uri) from exc

        if root.tag != ROOT_TAG:
            raise DescriptorError(f"Unexpected root element <{root.tag}>", uri=uri)

        triplea = root.find("triplea")
        minimum = _strip(triplea.get("minimumVersion")) if triplea is not None else None
        if minimum and not is_engine_compatible(minimum, self.engine_version):
            raise EngineVersionError(
                f"Game requires engine {minimum}, running {self.engine_version}",
                uri=uri,
                required_version=minimum,
                engine_version=self.engine_version,
            )

        info = root.find("info")
        name = _strip(info.get("name")) if info is not None else None
        if not name:
            raise DescriptorError("Descriptor has no <info name=...>", uri=uri)

        players = tuple(
            player_name
            for player_name in (_strip(p.get("name")) for p in root.iterfind("playerList/player"))
            if player_name
        )

        return GameDescriptor(
            name=name,
            uri=uri,
            version=_strip(info.get("version")),
            minimum_engine_version=minimum,
            players=players,
        )
