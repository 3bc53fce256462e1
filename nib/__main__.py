from __future__ import annotations

from nib.main import main

if __name__ == '__main__':
    raise SystemExit(main())
