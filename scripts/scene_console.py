#!/usr/bin/env python3
"""Interactive console for a running feedscape API."""

import asyncio
import sys

import httpx

API_BASE = "http://localhost:8000"

HELP_TEXT = """
feedscape console
=================

Commands:
  /scene               - Summarize the current scene
  /entities [n]        - List visible entities
  /window <w>          - Time window: all, last_hour, last_day, last_week
  /search <term>       - Filter titles (empty to clear)
  /hide <category>     - Hide a category
  /show <category>     - Show a category
  /sources             - List feed sources
  /add <url> <category> - Add a feed source (polls immediately)
  /remove <index>      - Remove a feed source (polls immediately)
  /refresh             - Poll all sources now
  /pick <x> <y>        - Pick the entity under a screen point
  /help                - Show this help
  /quit                - Exit
"""


class SceneConsole:
    def __init__(self):
        self.client = httpx.AsyncClient(base_url=API_BASE, timeout=60.0)

    async def close(self):
        await self.client.aclose()

    async def scene(self) -> str:
        """Summarize objects, lines and effects."""
        try:
            response = await self.client.get("/scene")
            response.raise_for_status()
            data = response.json()

            by_category: dict[str, int] = {}
            for obj in data["objects"]:
                by_category[obj["category"]] = by_category.get(obj["category"], 0) + 1

            lines = [
                f"Entities: {data['entities_total']} | Visible: {data['entities_visible']}",
                f"Lines: {len(data['lines'])} | Spawn effects: {len(data['effects'])}",
                f"Auto-rotate: {data['auto_rotate']} | Window: {data['filters']['time_window']}",
            ]
            for category, count in sorted(by_category.items()):
                lines.append(f"  {category:20} {count}")
            return "\n".join(lines)

        except httpx.HTTPError as e:
            return f"Error: {e}"

    async def entities(self, limit: int = 20) -> str:
        try:
            response = await self.client.get("/entities", params={"visible_only": True})
            response.raise_for_status()
            data = response.json()

            lines = [f"{data['visible']} visible of {data['total']}:"]
            for e in data["entities"][:limit]:
                title = e["title"] or "(untitled)"
                title = title[:60] + "..." if len(title) > 60 else title
                lines.append(f"  [{e['category']:12}] {e['engagement']:5.0f} | {title}")
            return "\n".join(lines)

        except httpx.HTTPError as e:
            return f"Error: {e}"

    async def update_filters(self, **changes) -> str:
        try:
            response = await self.client.put("/filters", json=changes)
            response.raise_for_status()
            data = response.json()
            hidden = [c for c, v in data["category_visibility"].items() if not v]
            return (
                f"Window: {data['time_window']} | Search: {data['search_term']!r} "
                f"| Hidden: {', '.join(hidden) or 'none'}"
            )

        except httpx.HTTPError as e:
            return f"Error: {e}"

    async def set_category(self, category: str, visible: bool) -> str:
        try:
            response = await self.client.get("/filters")
            response.raise_for_status()
            visibility = response.json()["category_visibility"]
        except httpx.HTTPError as e:
            return f"Error: {e}"
        visibility[category] = visible
        return await self.update_filters(category_visibility=visibility)

    async def sources(self) -> str:
        try:
            response = await self.client.get("/sources")
            response.raise_for_status()
            data = response.json()

            lines = [f"{len(data)} sources:"]
            for i, s in enumerate(data):
                lines.append(f"  {i:2}. [{s['category']:12}] {s['address']}")
            return "\n".join(lines)

        except httpx.HTTPError as e:
            return f"Error: {e}"

    async def add_source(self, address: str, category: str) -> str:
        try:
            response = await self.client.post(
                "/sources", json={"address": address, "category": category}
            )
            response.raise_for_status()
            return f"Added. {len(response.json())} sources configured."

        except httpx.HTTPError as e:
            return f"Error: {e}"

    async def remove_source(self, index: int) -> str:
        try:
            response = await self.client.delete(f"/sources/{index}")
            response.raise_for_status()
            return f"Removed. {len(response.json())} sources configured."

        except httpx.HTTPError as e:
            return f"Error: {e}"

    async def refresh(self) -> str:
        try:
            response = await self.client.post("/refresh")
            response.raise_for_status()
            data = response.json()
            return (
                f"Created: {len(data['created'])} | Repositioned: {len(data['repositioned'])} "
                f"| Destroyed: {len(data['destroyed'])} | Edges: {data['edges']}"
            )

        except httpx.HTTPError as e:
            return f"Error: {e}"

    async def pick(self, x: float, y: float) -> str:
        try:
            response = await self.client.post("/pointer", json={"x": x, "y": y})
            response.raise_for_status()
            data = response.json()
            entity = data["entity"]
            if entity is None:
                return "Nothing under the pointer."
            return f"{entity['title']}\n  {entity['category']} | {entity['published_at']}\n  {entity['link']}"

        except httpx.HTTPError as e:
            return f"Error: {e}"


async def main():
    print(HELP_TEXT)

    console = SceneConsole()

    # Check connection
    try:
        await console.client.get("/health")
        print("Connected to feedscape API at", API_BASE)
    except httpx.HTTPError:
        print(f"Error: Cannot connect to feedscape API at {API_BASE}")
        print("Make sure the API is running: python -m feedscape.api.main")
        return

    print("-" * 50)

    try:
        while True:
            try:
                user_input = input("\n> ").strip()
            except EOFError:
                break

            if not user_input:
                continue

            parts = user_input.split()
            command = parts[0].lower()

            if command in ["/quit", "/exit", "/q"]:
                break
            elif command == "/help":
                result = HELP_TEXT
            elif command == "/scene":
                result = await console.scene()
            elif command == "/entities":
                result = await console.entities(int(parts[1]) if len(parts) > 1 else 20)
            elif command == "/window" and len(parts) == 2:
                result = await console.update_filters(time_window=parts[1])
            elif command == "/search":
                result = await console.update_filters(search_term=" ".join(parts[1:]))
            elif command in ("/hide", "/show") and len(parts) == 2:
                result = await console.set_category(parts[1], command == "/show")
            elif command == "/sources":
                result = await console.sources()
            elif command == "/add" and len(parts) == 3:
                result = await console.add_source(parts[1], parts[2])
            elif command == "/remove" and len(parts) == 2:
                result = await console.remove_source(int(parts[1]))
            elif command == "/refresh":
                result = await console.refresh()
            elif command == "/pick" and len(parts) == 3:
                result = await console.pick(float(parts[1]), float(parts[2]))
            else:
                result = "Unknown command. Type /help for available commands."

            print(f"\n{result}")

    finally:
        await console.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)
