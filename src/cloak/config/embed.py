import os


def _parse_color(raw: str | int) -> int:
    if isinstance(raw, int):
        return raw
    text = raw.strip().lstrip("#")
    if text.lower().startswith("0x"):
        text = text[2:]
    return int(text, 16)


class Embed:
    def __init__(self, config: dict | None = None) -> None:
        embed_cfg = (config or {}).get("cloak", {}).get("embed", {})
        self.TITLE: str = str(embed_cfg.get("title", os.getenv("EMBED_TITLE", "The Roles")))
        self.COLOR: int = _parse_color(embed_cfg.get("color", os.getenv("EMBED_COLOR", "6495ED")))
        # Title of the section whose body becomes the embed description
        self.INTRO_SECTION: str = str(embed_cfg.get("intro_section", os.getenv("EMBED_INTRO_SECTION", "#INTRO")))
