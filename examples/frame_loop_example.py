"""Example driving an explorer session from a host frame loop.

A real front end would paint each value returned by ``tick()``; this one
prints a few frames of the animation that follows a click, then writes the
settled scene as SVG.

Run from the repository root so ``data/`` is found:

    python examples/frame_loop_example.py
"""

import time
from pathlib import Path

from mindmap_explorer.config.settings import ExplorerSettings
from mindmap_explorer.core.explorer import MindmapExplorer
from mindmap_explorer.render.svg import SvgRenderTarget

FPS = 30


class PrintingPresenter:
    """Detail presenter that writes to stdout instead of opening a panel."""

    def open_info(self, title, body):
        print(f"[info] {title}: {body}")

    def open_link(self, title, url):
        print(f"[link] {title} -> {url}")


def main():
    settings = ExplorerSettings(data_dir=Path("data"), duration=0.3)
    target = SvgRenderTarget(settings.viewport_width, settings.viewport_height)
    explorer = MindmapExplorer(settings, target, presenter=PrintingPresenter())

    if not explorer.load():
        print(explorer.status)
        return
    target.title = explorer.title
    print(f"Loaded {explorer.title!r}: {len(explorer.visible_ids())} nodes visible")

    # Open the first branch and play its transition frame by frame
    first_branch = explorer.hierarchy.root.children[0]
    plan = explorer.click(first_branch)
    print(f"Entering: {plan.nodes.enter}")

    while True:
        frame = explorer.tick()
        if not frame:
            break
        camera = frame.get("viewport")
        moving = sum(1 for key in frame if key != "viewport")
        print(f"{moving:3d} elements moving, camera {camera}")
        time.sleep(1 / FPS)

    explorer.show_details(first_branch, "info")
    explorer.show_details(first_branch, "link")

    output = Path("mindmap.svg")
    output.write_text(target.to_svg(), encoding="utf-8")
    print(f"Wrote {output}")


if __name__ == "__main__":
    main()
