from __future__ import annotations

from enum import IntFlag
from typing import Union


class Mods(IntFlag):
    NOMOD = 0
    NOFAIL = 1 << 0
    EASY = 1 << 1
    TOUCHSCREEN = 1 << 2
    HIDDEN = 1 << 3
    HARDROCK = 1 << 4
    SUDDENDEATH = 1 << 5
    DOUBLETIME = 1 << 6
    RELAX = 1 << 7
    HALFTIME = 1 << 8
    NIGHTCORE = 1 << 9
    FLASHLIGHT = 1 << 10
    AUTOPLAY = 1 << 11
    SPUNOUT = 1 << 12
    AUTOPILOT = 1 << 13
    PERFECT = 1 << 14
    KEY4 = 1 << 15
    KEY5 = 1 << 16
    KEY6 = 1 << 17
    KEY7 = 1 << 18
    KEY8 = 1 << 19
    FADEIN = 1 << 20
    RANDOM = 1 << 21
    CINEMA = 1 << 22
    TARGET = 1 << 23
    KEY9 = 1 << 24
    KEYCOOP = 1 << 25
    KEY1 = 1 << 26
    KEY3 = 1 << 27
    KEY2 = 1 << 28
    SCOREV2 = 1 << 29
    MIRROR = 1 << 30

    KEY_MODS = (
        KEY1 | KEY2 | KEY3 | KEY4 | KEY5 | KEY6 | KEY7 | KEY8 | KEY9 | KEYCOOP
    )

    def __repr__(self) -> str:
        if self.value == Mods.NOMOD:
            return "NM"

        return "".join(self.acronyms)

    @property
    def acronyms(self) -> list[str]:
        return [
            acronym for mod, acronym in MOD_ACRONYMS.items() if self.value & mod
        ]

    def has(self, acronym: str) -> bool:
        mod = ACRONYM_MODS.get(acronym.upper())
        if mod is None:
            return False

        return bool(self.value & mod)

    @classmethod
    def from_modstr(cls, s: str) -> Mods:
        mods = cls.NOMOD
        s = "".join(char for char in s.upper() if char.isalnum())
        if s == "NM":
            return mods

        while s:
            if s[:2] in ACRONYM_MODS:
                mods |= ACRONYM_MODS[s[:2]]
                s = s[2:]
            else:
                s = s[1:]

        return mods

    @classmethod
    def from_input(cls, value: Union[str, int, None]) -> Mods:
        if value is None:
            return cls.NOMOD

        if isinstance(value, int):
            return cls(value)

        if value.isdigit():
            return cls(int(value))

        return cls.from_modstr(value)


MOD_ACRONYMS: dict[Mods, str] = {
    Mods.NOFAIL: "NF",
    Mods.EASY: "EZ",
    Mods.TOUCHSCREEN: "TD",
    Mods.HIDDEN: "HD",
    Mods.HARDROCK: "HR",
    Mods.SUDDENDEATH: "SD",
    Mods.DOUBLETIME: "DT",
    Mods.RELAX: "RX",
    Mods.HALFTIME: "HT",
    Mods.NIGHTCORE: "NC",
    Mods.FLASHLIGHT: "FL",
    Mods.AUTOPLAY: "AT",
    Mods.SPUNOUT: "SO",
    Mods.AUTOPILOT: "AP",
    Mods.PERFECT: "PF",
    Mods.KEY4: "4K",
    Mods.KEY5: "5K",
    Mods.KEY6: "6K",
    Mods.KEY7: "7K",
    Mods.KEY8: "8K",
    Mods.FADEIN: "FI",
    Mods.RANDOM: "RD",
    Mods.CINEMA: "CN",
    Mods.TARGET: "TP",
    Mods.KEY9: "9K",
    Mods.KEYCOOP: "CO",
    Mods.KEY1: "1K",
    Mods.KEY3: "3K",
    Mods.KEY2: "2K",
    Mods.SCOREV2: "V2",
    Mods.MIRROR: "MR",
}

ACRONYM_MODS: dict[str, Mods] = {
    acronym: mod for mod, acronym in MOD_ACRONYMS.items()
}
