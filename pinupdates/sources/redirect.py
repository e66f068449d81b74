"""
HOMESERVER Update Management System
Copyright (C) 2024 HOMESERVER LLC

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

"""
Version discovery from a download redirect chain.
"""

import re
from typing import Any, Dict

from ..utils.errors import ParseFailure
from ..utils.fetcher import Fetcher
from ..utils.index import debug_log


def resolve(fetcher: Fetcher, source: Dict[str, Any], name: str = "dependency") -> str:
    """
    Follow redirects from `url` and extract `pattern`'s first group from
    the first redirect target it matches.
    """
    pattern = re.compile(source["pattern"])
    targets = fetcher.redirect_targets(source["url"])
    for target in targets:
        match = pattern.search(target)
        if match:
            debug_log(f"{name}: version found in redirect target {target}")
            return match.group(1)
    raise ParseFailure(f"{name}: no redirect target of {source['url']} matches {source['pattern']}",
                       dependency=name, value=targets[-1] if targets else None)
