"""
Public VCF dataset catalog.

A fixed, ordered list of remotely hosted VCFs the user can pick instead of
uploading a file. The catalog is read-only reference data.
"""

from typing import Optional, Tuple

from genoscript.schemas.conversion import PublicDataset, PublicSource

PUBLIC_DATASETS: Tuple[PublicDataset, ...] = (
    PublicDataset(
        name="1000 Genomes",
        sample_id="HG00096 (Chr 22)",
        url="https://storage.googleapis.com/genomics-public-data/1000-genomes/vcf/"
            "ALL.chr22.phase3_shapeit2_mvncall_integrated_v5b.20130502.genotypes.vcf.gz",
    ),
    PublicDataset(
        name="1000 Genomes",
        sample_id="NA12878 (Chr 1)",
        url="https://storage.googleapis.com/genomics-public-data/1000-genomes/vcf/"
            "ALL.chr1.phase3_shapeit2_mvncall_integrated_v5b.20130502.genotypes.vcf.gz",
    ),
    PublicDataset(
        name="GIAB",
        sample_id="HG001 (NA12878)",
        url="https://ftp-trace.ncbi.nlm.nih.gov/ReferenceSamples/giab/release/NA12878_HG001/"
            "NISTv4.2.1/GRCh38/HG001_GRCh38_1_22_v4.2.1_benchmark.vcf.gz",
    ),
)


def find_dataset(url: str) -> Optional[PublicDataset]:
    """Look up a catalog entry by its retrieval URL."""
    for dataset in PUBLIC_DATASETS:
        if dataset.url == url:
            return dataset
    return None


def resolve_dataset_selection(source: PublicSource) -> PublicSource:
    """
    Fill in ``dataset`` when a public source only names a catalog URL.

    Raises:
        ValueError: if the URL is not in the catalog.
    """
    if source.dataset is not None or not source.dataset_url:
        return source
    dataset = find_dataset(source.dataset_url)
    if dataset is None:
        raise ValueError(f"Unknown public dataset URL: {source.dataset_url}")
    return PublicSource(dataset=dataset)
