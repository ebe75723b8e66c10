"""
Sample statistics for simulated occupancy data.

Generates per-species summary tables for a long-format dataset after
simulation.
"""

from pathlib import Path
from typing import Dict, Union

import pandas as pd


def generate_sample_stats(
    df: pd.DataFrame,
    output_dir: Union[str, Path],
    verbose: bool = True
) -> Dict[str, pd.DataFrame]:
    """
    Generate all sample statistics tables.

    Args:
        df: Long-format simulated data (species, site, X1..XK, J, Y[, z])
        output_dir: Directory to save outputs (sample_stats/)
        verbose: Whether to print progress messages

    Returns:
        Dict of table name -> DataFrame
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if verbose:
        print("=" * 60)
        print("SAMPLE STATISTICS")
        print("=" * 60)

    tables = {
        'species_summary': species_summary(df, output_dir, verbose),
        'detection_histogram': detection_histogram(df, output_dir, verbose),
        'covariate_summary': covariate_summary(df, output_dir, verbose),
    }

    if verbose:
        print(f"\nSample statistics saved to: {output_dir}")
        print("=" * 60 + "\n")

    return tables


def species_summary(
    df: pd.DataFrame,
    output_dir: Path,
    verbose: bool = True
) -> pd.DataFrame:
    """
    Per-species naive occupancy, true occupancy and detection intensity.

    Naive occupancy is the share of sites with at least one detection; it
    underestimates true occupancy whenever detection is imperfect.
    """
    detected = df['Y'] > 0
    grouped = df.assign(detected=detected).groupby('species')

    summary_df = pd.DataFrame({
        'Sites': grouped.size(),
        'Detected sites': grouped['detected'].sum(),
        'Naive occupancy': grouped['detected'].mean(),
    })
    if 'z' in df.columns:
        summary_df['True occupancy'] = grouped['z'].mean()

    # Mean detections where the species was seen at all
    summary_df['Mean detections | detected'] = (
        df[detected].groupby('species')['Y'].mean().reindex(summary_df.index)
    )
    summary_df = summary_df.reset_index().rename(columns={'species': 'Species'})

    summary_df.to_csv(output_dir / 'species_summary.csv', index=False)
    if verbose:
        print(f"  Saved: species_summary.csv ({len(summary_df)} species)")
        overall = detected.mean()
        print(f"    Overall naive occupancy: {overall:.3f}")
        if 'z' in df.columns:
            print(f"    Overall true occupancy:  {df['z'].mean():.3f}")

    return summary_df


def detection_histogram(
    df: pd.DataFrame,
    output_dir: Path,
    verbose: bool = True
) -> pd.DataFrame:
    """Frequency of each detection count 0..max(J)."""
    max_j = int(df['J'].max())
    counts = df['Y'].value_counts().reindex(range(max_j + 1), fill_value=0)
    total = len(df)

    rows = []
    for n_detections, count in counts.items():
        rows.append({
            'Detections': n_detections,
            'Count': int(count),
            'Percentage': 100 * count / total
        })

    hist_df = pd.DataFrame(rows)
    hist_df.to_csv(output_dir / 'detection_histogram.csv', index=False)

    if verbose:
        print("  Saved: detection_histogram.csv")
        for _, row in hist_df.iterrows():
            print(f"    {int(row['Detections'])} detections: "
                  f"{int(row['Count'])} ({row['Percentage']:.1f}%)")

    return hist_df


def covariate_summary(
    df: pd.DataFrame,
    output_dir: Path,
    verbose: bool = True
) -> pd.DataFrame:
    """Covariate statistics over sites (each site counted once)."""
    cov_cols = [c for c in df.columns if c.startswith('X') and c[1:].isdigit()]
    sites = df.drop_duplicates(subset=['site'])

    rows = []
    for col in cov_cols:
        values = sites[col]
        rows.append({
            'Covariate': col,
            'Mean': values.mean(),
            'Std': values.std(),
            'Min': values.min(),
            'Max': values.max(),
        })

    cov_df = pd.DataFrame(rows, columns=['Covariate', 'Mean', 'Std', 'Min', 'Max'])
    cov_df.to_csv(output_dir / 'covariate_summary.csv', index=False)

    if verbose:
        print(f"  Saved: covariate_summary.csv ({len(cov_df)} covariates)")

    return cov_df
