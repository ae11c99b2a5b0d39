import re
import logging
from typing import Generator
from importlib import resources

from .surface import CStarSurface, CStarSurfaceCase

logger = logging.getLogger(__name__)


def _parse_blocks(text: str) -> list[list[int]]:
    return [[int(x) for x in re.findall(r'-?\d+', block)] for block in re.findall(r'\[([^\[\]]*)\]', text)]


def generate_surface(line: str) -> CStarSurface:
    '''
    parse a line ``<index> <case> <l> <d> <label>`` of the catalogue, e.g. ``1 ee [[3,1],[3],[2]] [[-2,-1],[1],[1]] E6``
    '''
    index, case, ls, ds, label = line.strip().split(' ', 4)
    extra = {'catalog_index': index, 'catalog_label': label}
    logger.debug("parsing catalogue entry %s", index)
    return CStarSurface(_parse_blocks(ls), _parse_blocks(ds), case, extra=extra)


def generate_surfaces(case: CStarSurfaceCase | str | None = None) -> Generator[CStarSurface, None, None]:
    if case is not None:
        case = CStarSurfaceCase(case)
    with resources.files("cstarSurfaces").joinpath("catalog.txt").open() as file:
        for line in file.readlines():
            if len(line.strip()) == 0:
                continue
            _, line_case, _ = line.strip().split(' ', 2)
            if case is not None and line_case != case.value:
                continue
            yield generate_surface(line)


if __name__ == "__main__":
    for surface in generate_surfaces():
        print(surface.extra['catalog_index'], surface, surface.l, surface.d)
