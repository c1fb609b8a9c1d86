import argparse
import asyncio
from typing import ClassVar, Optional
from rich.console import Console, Group
from rich.text import Text
from rich.tree import Tree
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Footer, Header, Label, ListItem, ListView, Static

from hn_preview.config import get_setting, save_config
from hn_preview.errors import FetchError
from hn_preview.formatting import format_local_time, html_to_text
from hn_preview.gateway import HNGateway
from hn_preview.logging_config import configure_logging
from hn_preview.models import Comment, Loaded, Loading, PreviewState, StoryItem, StoryPageData, Unset
from hn_preview.session import PreviewSession

STORY_TEXT_PREVIEW = 300


def _add_comments(node: Tree, comments: list[Comment]) -> None:
    for c in comments:
        label = Text()
        label.append(c.author or "[deleted]", style="bold cyan")
        label.append(f"  {format_local_time(c.time)}\n", style="dim")
        label.append(html_to_text(c.text))
        _add_comments(node.add(label), c.sub_comments)


def render_story_page(data: StoryPageData) -> Group:
    tree = Tree(Text(f"{len(data.comments)} threads", style="dim"), guide_style="grey50")
    _add_comments(tree, data.comments)
    return Group(Text(data.item.title, style="bold"), tree)


def render_preview(state: PreviewState) -> Group | Text:
    match state:
        case Unset() | Loading():
            return Text("loading...", style="italic")
        case Loaded(data=data):
            return render_story_page(data)


class StoryListing(ListItem):
    def __init__(self, story: StoryItem):
        super().__init__()
        self.story = story

    def compose(self) -> ComposeResult:
        s = self.story
        with Vertical():
            yield Label(f"{s.id}: {s.title}", classes="title")
            text = html_to_text(s.text)
            if text:
                yield Static(text[:STORY_TEXT_PREVIEW], classes="text")
            with Horizontal(classes="meta"):
                yield Label(f"time: {format_local_time(s.time)}", classes="time")
                yield Label(f"kids: {len(s.kids)}", classes="kids")


class StoryPreview(VerticalScroll):
    """Right-hand pane mirroring the session's preview state."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.state: PreviewState = Unset()

    def compose(self) -> ComposeResult:
        yield Static(render_preview(self.state), id="preview-body")

    def show(self, state: PreviewState) -> None:
        self.state = state
        self.query_one("#preview-body", Static).update(render_preview(state))
        self.scroll_home(animate=False)


class HNPreviewTUI(App):
    CSS = """
    #stories { width: 1fr; max-width: 60; }
    #preview { width: 2fr; padding: 0 1; border-left: solid $primary; }
    StoryListing { padding: 1; margin-bottom: 1; background: $boost; }
    .title { color: $text-muted; text-style: bold; }
    .text { padding: 1 0; }
    .meta { height: 1; }
    .kids { margin-left: 3; }
    #error { color: red; }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("v", "view", "View"),
    ]

    def __init__(self, session: PreviewSession, count: int):
        super().__init__()
        self.session = session
        self.count = count
        self.session.subscribe(self._on_preview_state)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            yield ListView(id="stories")
            yield StoryPreview(id="preview")
        yield Footer()

    async def on_mount(self): self.action_refresh()

    async def on_unmount(self):
        await self.session.gateway.close()

    def _on_preview_state(self, state: PreviewState) -> None:
        self.query_one("#preview", StoryPreview).show(state)

    @work(group="stories", exclusive=True)
    async def action_refresh(self):
        lst = self.query_one("#stories", ListView)
        await lst.clear()
        try:
            stories = await self.session.list_top_story_previews(self.count)
        except FetchError as e:
            await lst.append(ListItem(Label(str(e), id="error")))
            return
        for story in stories:
            await lst.append(StoryListing(story))

    @work(group="preview")
    async def preview_story(self, story_id: int):
        await self.session.select_story(story_id)

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        if isinstance(event.item, StoryListing):
            self.preview_story(event.item.story.id)

    def action_view(self):
        if isinstance(item := self.query_one("#stories", ListView).highlighted_child, StoryListing):
            import webbrowser
            webbrowser.open(item.story.url or f"https://news.ycombinator.com/item?id={item.story.id}")


def save_settings(count: int, base_url: str, log_level: str) -> None:
    save_config("story_count", count)
    save_config("base_url", base_url)
    save_config("log_level", log_level)


async def run_batch(base_url: str, count: int, console: Optional[Console] = None, as_json: bool = False):
    console = console or Console()
    async with HNGateway(base_url) as gateway:
        session = PreviewSession(gateway)
        stories = await session.list_top_story_previews(count)
        if as_json:
            preview = None
            if stories:
                state = await session.select_story(stories[0].id)
                preview = state.data.to_dict() if isinstance(state, Loaded) else None
            console.print_json(data={"stories": [s.to_dict() for s in stories], "preview": preview})
            return

        for s in stories:
            console.print(f"[bold]{s.id}[/]: {s.title} [dim]({format_local_time(s.time)}, kids: {len(s.kids)})[/]")
        if not stories:
            return

        match await session.select_story(stories[0].id):
            case Loaded(data=data):
                console.print(render_story_page(data))
            case Unset() | Loading():
                console.print(f"[red]Could not load story {stories[0].id}[/]")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--batch", action="store_true")
    parser.add_argument("--json", action="store_true", help="With --batch, print records as JSON")
    parser.add_argument("--save", action="store_true", help="Remember --count, --base-url and --log-level")
    parser.add_argument("--count", type=int, default=get_setting("story_count"))
    parser.add_argument("--base-url", default=get_setting("base_url"))
    parser.add_argument("--log-level", default=get_setting("log_level"))
    args = parser.parse_args()

    if args.save:
        save_settings(args.count, args.base_url, args.log_level)

    configure_logging(args.log_level)
    if args.batch:
        asyncio.run(run_batch(args.base_url, args.count, as_json=args.json))
    else:
        HNPreviewTUI(PreviewSession(HNGateway(args.base_url)), args.count).run()
