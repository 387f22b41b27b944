from __future__ import annotations

from pydantic import BaseModel

from constants.mods import Mods


class Mod(BaseModel):
    acronym: str


def convert_mods(mods: Mods) -> list[Mod]:
    return [Mod(acronym=acronym) for acronym in mods.acronyms]


def to_mods(mod_list: list[Mod]) -> Mods:
    return Mods.from_modstr("".join(mod.acronym for mod in mod_list))


def has_mod(mod_list: list[Mod], desired_mod: str) -> bool:
    return any((mod.acronym == desired_mod for mod in mod_list))
