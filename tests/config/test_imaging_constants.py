from imaging_diffusion.config.constants import (
    ATOMS_DATASET,
    DEFAULT_CELL_NUMBER,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DOMAIN_SIZE,
    DEFAULT_EXPOSURE,
    DEFAULT_TIMESTEP,
    HISTOGRAM_COUNTER_MAX,
    PHOTON_CHUNK_ROWS,
    PHOTONS_DATASET,
    STEP_LOG_FLUSH_THRESHOLD,
)


def test_counter_max_is_unsigned_32_bit() -> None:
    assert HISTOGRAM_COUNTER_MAX == 4_294_967_295


def test_histogram_defaults_are_positive() -> None:
    assert DEFAULT_DOMAIN_SIZE > 0.0
    assert isinstance(DEFAULT_CELL_NUMBER, int) and DEFAULT_CELL_NUMBER > 0


def test_exposure_spans_many_timesteps() -> None:
    assert DEFAULT_EXPOSURE / DEFAULT_TIMESTEP > 1


def test_buffer_sizes_are_positive_ints() -> None:
    for value in (DEFAULT_CHUNK_SIZE, PHOTON_CHUNK_ROWS, STEP_LOG_FLUSH_THRESHOLD):
        assert isinstance(value, int) and value > 0


def test_dataset_names_differ() -> None:
    assert PHOTONS_DATASET != ATOMS_DATASET
