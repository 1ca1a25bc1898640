"""Entry point wrapper for ``python -m comp_generator``.

When the package is executed as a module the code here simply forwards
execution to :func:`comp_generator.main`, so ``python -m comp_generator`` and
the installed ``comp-generator`` console script behave identically.

Example
-------
::

    python -m comp_generator --input solo.mid --output comped.mid
"""

from . import main

if __name__ == "__main__":
    main()
