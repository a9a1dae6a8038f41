import os
import sys
from pathlib import Path

import fncli

from . import db
from .core.errors import MinderError
from .lib import ansi
from .lib.errors import exit_error
from .lib.log import configure_logging


def main():
    configure_logging()
    if os.environ.get("NO_COLOR") or not sys.stdout.isatty():
        ansi.use(ansi.PLAIN)
    db.init()
    fncli.autodiscover(Path(__file__).parent, "minder")

    user_args = sys.argv[1:]
    try:
        if not user_args:
            from .dash import dashboard

            dashboard()
            return
        code = fncli.dispatch(["minder", *user_args])
    except MinderError as e:
        exit_error(str(e))
    sys.exit(code)


if __name__ == "__main__":
    main()
