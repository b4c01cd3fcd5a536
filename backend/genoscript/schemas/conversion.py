"""
Request/response models for script generation.

These models describe what the user asked for: where the input comes from,
what kind of file it is, which outputs to produce and the numeric/boolean
parameters for each output type.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InputFileType(str, Enum):
    """Input file formats. The product currently always sends VCF."""
    VCF = "vcf"
    CSV = "csv"
    TXT = "txt"


class OutputFileType(str, Enum):
    """Artifacts the generated script can produce."""
    FASTQ = "fastq"
    BED = "bed"


# Canonical section order in the prompt, independent of selection order
OUTPUT_TYPE_ORDER = (OutputFileType.FASTQ, OutputFileType.BED)


class FastqOptions(BaseModel):
    """Parameters for synthetic paired-end read simulation."""
    num_reads: int = Field(default=1_000_000, gt=0, description="Number of read pairs")
    read_length1: int = Field(default=150, gt=0, description="Read 1 length")
    read_length2: int = Field(default=150, gt=0, description="Read 2 length")
    error_rate: float = Field(default=0.0, ge=0.0, description="Base error rate")
    mutation_rate: float = Field(default=0.0, ge=0.0, description="Mutation rate")
    insert_size: int = Field(default=500, gt=0, description="Outer distance between read ends")
    insert_std_dev: int = Field(default=50, ge=0, description="Standard deviation of the outer distance")


class BedOptions(BaseModel):
    """Parameters for coordinate-interval (BED) extraction."""
    use_end_tag: bool = Field(default=True, description="Prefer the INFO/END field for interval ends")
    window_size: int = Field(default=1, gt=0, description="Interval width used when no END is available")
    annotate_genes: bool = Field(default=False, description="Intersect intervals with a gene annotation")
    generate_igv_snapshot: bool = Field(default=False, description="Render IGV snapshots of the BED output")


class ConversionOptions(BaseModel):
    """Both option records are always present; each is read only when its output is selected."""
    fastq: FastqOptions = Field(default_factory=FastqOptions)
    bed: BedOptions = Field(default_factory=BedOptions)


class LocalFile(BaseModel):
    """Descriptor of a file chosen through the upload widget."""
    name: str
    size_bytes: int = Field(default=0, ge=0)


class PublicDataset(BaseModel):
    """A publicly hosted VCF from the dataset catalog."""
    name: str
    sample_id: str
    url: str

    model_config = ConfigDict(frozen=True)


class LocalSource(BaseModel):
    type: Literal["local"] = "local"
    file: Optional[LocalFile] = None


class PublicSource(BaseModel):
    type: Literal["public"] = "public"
    dataset: Optional[PublicDataset] = None
    # Clients may pick a catalog entry by URL only; see catalog.resolve_dataset_selection
    dataset_url: Optional[str] = None


InputSource = Annotated[Union[LocalSource, PublicSource], Field(discriminator="type")]


class ScriptRequest(BaseModel):
    """Everything needed to build one generation prompt."""
    source: InputSource
    input_type: InputFileType = InputFileType.VCF
    output_types: List[OutputFileType] = Field(default_factory=list)
    options: ConversionOptions = Field(default_factory=ConversionOptions)

    @field_validator("output_types")
    @classmethod
    def deduplicate_output_types(cls, v):
        # Selection is toggle based, so repeated entries carry no meaning
        return [t for t in OUTPUT_TYPE_ORDER if t in v]


class PromptResponse(BaseModel):
    prompt: str
    output_types: List[OutputFileType]


class ScriptResponse(BaseModel):
    script: str
    model: str
    output_types: List[OutputFileType]
    suggested_filename: str
    run_instructions: str
