"""DepMap pipeline relating homologous-recombination status to gene dependency."""

__version__ = "0.1.0"
