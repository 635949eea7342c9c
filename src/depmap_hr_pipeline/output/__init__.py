"""Output generation: CSV/JSON artifacts and dependency plots."""

from depmap_hr_pipeline.output.writers import (
    serialize_list_columns,
    write_results_bundle,
    write_table,
)
from depmap_hr_pipeline.output.visualizations import (
    generate_all_plots,
    plot_dependency_boxplot,
    plot_dependency_density,
    plot_dependency_violin,
    plot_ranked_samples,
    plot_summary_panel,
)

__all__ = [
    "write_table",
    "write_results_bundle",
    "serialize_list_columns",
    "generate_all_plots",
    "plot_dependency_violin",
    "plot_dependency_boxplot",
    "plot_dependency_density",
    "plot_ranked_samples",
    "plot_summary_panel",
]
