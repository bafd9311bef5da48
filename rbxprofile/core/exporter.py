"""Export utilities for aggregated profiles."""

from pathlib import Path

from rbxprofile.models.profile import AggregatedProfile
from rbxprofile.models.result import ProfileResult


def to_json(profile: AggregatedProfile, indent: int = 2) -> str:
    """
    Convert AggregatedProfile to JSON string.

    Args:
        profile: AggregatedProfile to serialize
        indent: JSON indentation level

    Returns:
        JSON string
    """
    return profile.model_dump_json(indent=indent)


def to_dict(profile: AggregatedProfile) -> dict:
    """
    Convert AggregatedProfile to a JSON-compatible dictionary.

    Args:
        profile: AggregatedProfile to convert

    Returns:
        Dictionary representation
    """
    return profile.model_dump(mode="json")


def save_json(
    profile: AggregatedProfile,
    filepath: str | Path,
    indent: int = 2,
) -> Path:
    """
    Save AggregatedProfile to JSON file.

    Args:
        profile: AggregatedProfile to save
        filepath: Output file path
        indent: JSON indentation level

    Returns:
        Path to saved file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(profile.model_dump_json(indent=indent), encoding="utf-8")
    return path


def save_many_json(
    results: list[ProfileResult],
    output_dir: str | Path,
    filename_template: str = "{username}.json",
) -> list[Path]:
    """
    Save the profiles of successful lookups to individual JSON files.

    Args:
        results: List of ProfileResults
        output_dir: Directory for output files
        filename_template: Template with {username} placeholder

    Returns:
        List of paths to saved files
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    saved = []
    for result in results:
        if result.profile:
            filename = filename_template.format(username=result.profile.username)
            saved.append(save_json(result.profile, output_path / filename))

    return saved


def load_json(filepath: str | Path) -> AggregatedProfile:
    """
    Load AggregatedProfile from JSON file.

    Args:
        filepath: Path to JSON file

    Returns:
        AggregatedProfile instance
    """
    path = Path(filepath)
    return AggregatedProfile.model_validate_json(path.read_text(encoding="utf-8"))
