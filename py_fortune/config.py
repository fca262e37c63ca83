"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Generator settings pulled from environment variables."""

    # Numerical tolerances (tuned for unit-to-thousands coordinate ranges)
    sweep_line_epsilon: float = Field(
        default=1e-3,
        description="Distance within which an arc focus counts as lying on the sweep line",
    )
    discriminant_epsilon: float = Field(
        default=1e-3,
        description="Negative discriminants above -epsilon are snapped to zero",
    )
    parallel_tolerance: float = Field(
        default=1e-6, description="Tolerance on |dot| == 1 for parallel edges"
    )

    # Diagram assembly
    merge_collinear_edges: bool = Field(
        default=False,
        description="Elide degree-2 vertices joining two collinear edges",
    )
    order_site_edges: bool = Field(
        default=True, description="Order each site's edges into a closed loop"
    )

    # Relaxation
    relax_mode: str = Field(
        default="centroid", description="Relaxation target: centroid or midpoint"
    )

    # Debug drawing
    debug_draw: bool = Field(default=False, description="Render the final sweep state")
    debug_draw_events: bool = Field(
        default=False, description="Also render the sweep state after every event"
    )
    debug_output_dir: str = Field(
        default=".", description="Directory for debug renderings"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Logging format (plain, json)")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "FORTUNE_"
        extra = "ignore"


settings = Settings()
