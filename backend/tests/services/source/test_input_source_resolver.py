"""
Unit tests for the input source resolver and dataset catalog.
"""

import shlex
import shutil
import subprocess

import pytest

from genoscript.schemas.conversion import LocalFile, LocalSource, PublicDataset, PublicSource
from genoscript.services.source.catalog import (
    PUBLIC_DATASETS,
    find_dataset,
    resolve_dataset_selection,
)
from genoscript.services.source.resolver import (
    base_name_of,
    file_name_from_url,
    resolve_input_source,
)


class TestBaseName:

    @pytest.mark.parametrize("file_name, expected", [
        ("sample.vcf", "sample"),
        ("sample.vcf.gz", "sample"),
        ("calls.csv", "calls"),
        ("HG001_GRCh38_1_22_v4.2.1_benchmark.vcf.gz", "HG001_GRCh38_1_22_v4.2.1_benchmark"),
        ("noext", "noext"),
        ('my "best".vcf', "my__best_"),
        ("$(touch x).vcf", "__touch_x_"),
        ("", ""),
    ])
    def test_strips_extensions(self, file_name, expected):
        assert base_name_of(file_name) == expected

    def test_file_name_from_url_ignores_query(self):
        assert file_name_from_url("https://example.org/data/x.vcf.gz?download=1") == "x.vcf.gz"


class TestLocalSource:

    def test_local_file_check_block(self):
        source = LocalSource(file=LocalFile(name="sample.vcf", size_bytes=2048))

        resolved = resolve_input_source(source)

        assert resolved.kind == "local"
        assert resolved.file_name == "sample.vcf"
        assert resolved.base_name == "sample"
        assert "INPUT_FILE=sample.vcf\n" in resolved.instructions
        assert 'if [ ! -f "$INPUT_FILE" ]' in resolved.instructions
        assert "exit 1" in resolved.instructions
        assert resolved.download_url is None
        assert resolved.required_tools == ()

    def test_no_file_uses_empty_placeholder(self):
        resolved = resolve_input_source(LocalSource())

        assert resolved.file_name == ""
        assert "INPUT_FILE=''" in resolved.instructions


def _run_block(instructions, cwd):
    return subprocess.run(["bash", "-c", instructions], cwd=cwd, capture_output=True, text=True)


@pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")
class TestLocalBlockUnderBash:
    """Run the generated existence check with awkward file names."""

    def test_command_substitution_not_executed(self, tmp_path):
        source = LocalSource(file=LocalFile(name="$(touch INJECTED).vcf"))

        result = _run_block(resolve_input_source(source).instructions, tmp_path)

        assert result.returncode == 1
        assert not (tmp_path / "INJECTED").exists()

    @pytest.mark.parametrize("name", ['my "best".vcf', "it's `here`.vcf", "cost $HOME.vcf"])
    def test_existing_file_with_metacharacters_found(self, tmp_path, name):
        (tmp_path / name).write_text("##fileformat=VCFv4.2\n")
        source = LocalSource(file=LocalFile(name=name))

        result = _run_block(resolve_input_source(source).instructions, tmp_path)

        assert result.returncode == 0, result.stderr

    def test_public_url_quoted(self, tmp_path):
        dataset = PublicDataset(name="Custom", sample_id="S1", url="https://example.org/$(touch INJECTED).vcf.gz")

        instructions = resolve_input_source(PublicSource(dataset=dataset)).instructions
        # only the variable assignments, no download is attempted
        assignments = "\n".join(instructions.splitlines()[:2]) + '\nprintf "%s\\n" "$VCF_URL"'
        result = _run_block(assignments, tmp_path)

        assert result.stdout.strip() == dataset.url
        assert not (tmp_path / "INJECTED").exists()


class TestPublicSource:

    @pytest.fixture
    def dataset(self):
        return PUBLIC_DATASETS[2]

    def test_download_block(self, dataset):
        resolved = resolve_input_source(PublicSource(dataset=dataset))

        assert resolved.kind == "public"
        assert resolved.download_url == dataset.url
        assert resolved.file_name == "HG001_GRCh38_1_22_v4.2.1_benchmark.vcf.gz"
        assert f"VCF_URL={shlex.quote(dataset.url)}" in resolved.instructions
        assert "wget" in resolved.required_tools

    def test_existing_file_skips_download(self, dataset):
        instructions = resolve_input_source(PublicSource(dataset=dataset)).instructions

        # existence check comes before the fetch
        assert instructions.index('if [ -f "$INPUT_FILE" ]') < instructions.index('wget -q -O "$INPUT_FILE"')

    def test_index_failure_is_a_warning(self, dataset):
        instructions = resolve_input_source(PublicSource(dataset=dataset)).instructions
        index_block = instructions[instructions.index('"$INPUT_FILE.tbi"'):]

        assert "$VCF_URL.tbi" in index_block
        assert "Warning" in index_block
        assert "exit 1" not in index_block

    def test_main_download_failure_is_fatal(self, dataset):
        instructions = resolve_input_source(PublicSource(dataset=dataset)).instructions
        main_block = instructions[:instructions.index('"$INPUT_FILE.tbi"')]

        assert "exit 1" in main_block

    def test_no_dataset_uses_empty_placeholder(self):
        resolved = resolve_input_source(PublicSource())

        assert resolved.file_name == ""
        assert resolved.download_url == ""

    def test_unknown_source_type_rejected(self):
        with pytest.raises(TypeError):
            resolve_input_source(object())


class TestCatalog:

    def test_catalog_order_and_contents(self):
        assert [d.sample_id for d in PUBLIC_DATASETS] == [
            "HG00096 (Chr 22)",
            "NA12878 (Chr 1)",
            "HG001 (NA12878)",
        ]
        assert all(d.url.endswith(".vcf.gz") for d in PUBLIC_DATASETS)

    def test_find_dataset(self):
        assert find_dataset(PUBLIC_DATASETS[1].url) == PUBLIC_DATASETS[1]
        assert find_dataset("https://example.org/missing.vcf.gz") is None

    def test_resolve_selection_by_url(self):
        source = resolve_dataset_selection(PublicSource(dataset_url=PUBLIC_DATASETS[0].url))

        assert source.dataset == PUBLIC_DATASETS[0]

    def test_resolve_selection_unknown_url(self):
        with pytest.raises(ValueError):
            resolve_dataset_selection(PublicSource(dataset_url="https://example.org/x.vcf.gz"))

    def test_resolve_selection_keeps_explicit_dataset(self):
        dataset = PublicDataset(name="Custom", sample_id="S1", url="https://example.org/s1.vcf.gz")
        source = PublicSource(dataset=dataset)

        assert resolve_dataset_selection(source) is source
