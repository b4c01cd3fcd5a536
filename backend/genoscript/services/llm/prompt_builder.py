"""
Prompt Synthesizer.

Builds the instruction document sent to the text-generation backend. Each
section has its own builder so it can be checked against fixed inputs;
``build_prompt`` only decides which sections to include and in what order.

Output depends only on the arguments: same request, same prompt text.
"""

from typing import Iterable, List, Sequence, Tuple

from genoscript.schemas.conversion import (
    OUTPUT_TYPE_ORDER,
    BedOptions,
    ConversionOptions,
    FastqOptions,
    InputFileType,
    OutputFileType,
)
from genoscript.services.source.resolver import ResolvedSource, resolve_input_source

SCRIPT_LANGUAGE = "bash"
SECTION_SEPARATOR = "\n---\n"

GENE_ANNOTATION_URL = (
    "https://ftp.ebi.ac.uk/pub/databases/gencode/Gencode_human/release_44/"
    "gencode.v44.basic.annotation.gtf.gz"
)
GENE_ANNOTATION_GTF = "gencode.v44.basic.annotation.gtf.gz"
GENE_ANNOTATION_BED = "gencode.v44.genes.bed"

IGV_VERSION = "2.16.2"
IGV_URL = f"https://data.broadinstitute.org/igv/projects/downloads/2.16/IGV_{IGV_VERSION}.zip"
IGV_DIR = f"IGV_{IGV_VERSION}"
IGV_GENOME = "hg38"

# Install guidance shown in the dependency preamble
TOOL_INSTALL_HINTS = {
    "wget": "apt-get install wget  (or: brew install wget)",
    "bcftools": "conda install -c bioconda bcftools",
    "samtools": "conda install -c bioconda samtools",
    "wgsim": "conda install -c bioconda wgsim",
    "awk": "preinstalled on most systems (gawk: apt-get install gawk)",
    "bedtools": "conda install -c bioconda bedtools",
    "unzip": "apt-get install unzip",
    "java": "conda install -c conda-forge openjdk=17",
    "xvfb-run": "apt-get install xvfb",
}


def _unique(tools: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for tool in tools:
        if tool not in seen:
            seen.append(tool)
    return tuple(seen)


def selected_output_types(output_types: Iterable[OutputFileType]) -> List[OutputFileType]:
    """Selected output types in canonical order, duplicates removed."""
    chosen = set(output_types)
    return [t for t in OUTPUT_TYPE_ORDER if t in chosen]


def required_tools(
    resolved: ResolvedSource,
    input_type: InputFileType,
    output_types: Sequence[OutputFileType],
    options: ConversionOptions,
) -> Tuple[str, ...]:
    """External command-line tools the generated script will invoke."""
    tools = list(resolved.required_tools)
    is_vcf = input_type == InputFileType.VCF

    if OutputFileType.FASTQ in output_types and is_vcf:
        tools += ["bcftools", "samtools", "wgsim"]

    if OutputFileType.BED in output_types:
        if is_vcf:
            if options.bed.use_end_tag:
                tools.append("bcftools")
            tools.append("awk")
        # Post-processing steps are only commented templates for non-VCF input
        if options.bed.annotate_genes and is_vcf:
            tools += ["wget", "awk", "bedtools"]
        if options.bed.generate_igv_snapshot and is_vcf:
            tools += ["wget", "unzip", "java", "xvfb-run"]

    return _unique(tools)


def build_task_section(
    resolved: ResolvedSource,
    input_type: InputFileType,
    output_types: Sequence[OutputFileType],
) -> str:
    outputs = ", ".join(t.value for t in output_types)
    origin = "a local file" if resolved.kind == "local" else "a public dataset download"
    return (
        "You are an expert bioinformatician. Your task is to generate ONE single, runnable "
        f"{SCRIPT_LANGUAGE} script that performs the conversion described below.\n"
        f'The input is {origin} named "{resolved.file_name}" of type "{input_type.value}".\n'
        f"The user wants to generate the following output file types: {outputs}.\n"
        "\n"
        "General rules:\n"
        f"1. Start the script with '#!/bin/bash' and 'set -e' so it is executable and exits on error.\n"
        "2. Add comments explaining each major step.\n"
        f'3. Use the input file name "{resolved.file_name}" (via the INPUT_FILE variable) in every command.\n'
        f'4. Base every output file name on the input base name "{resolved.base_name}" '
        f'(for example "{resolved.base_name}.bed").'
    )


def build_source_section(resolved: ResolvedSource) -> str:
    if resolved.kind == "local":
        lead = (
            "Input Handling (local file):\n"
            "The input file is provided locally. Right after 'set -e', the script MUST contain the "
            "following block exactly as written (do not paraphrase or reorder it). It stops the "
            "script if the file is missing:"
        )
    else:
        lead = (
            "Input Handling (public dataset):\n"
            f"The input VCF is downloaded from {resolved.download_url}\n"
            "Right after 'set -e', the script MUST contain the following block exactly as written "
            "(do not paraphrase or reorder it). It downloads the file only when it is not already "
            "present under its base name, then tries to fetch the .tbi index. A failed VCF download "
            "is fatal; a failed index download is only a warning:"
        )
    return f"{lead}\n```{SCRIPT_LANGUAGE}\n{resolved.instructions}\n```"


def build_dependency_section(tools: Sequence[str]) -> str:
    lines = [
        "Dependencies:",
        "At the top of the script, after the shebang, add a comment block titled 'Required tools' "
        "that lists every external command-line tool used below, one per line, each with install "
        "guidance:",
    ]
    for tool in tools:
        lines.append(f"- {tool}: {TOOL_INSTALL_HINTS.get(tool, 'see the tool documentation')}")
    if not tools:
        lines.append("- none beyond standard POSIX utilities")
    return "\n".join(lines)


def build_tool_check_section(tools: Sequence[str]) -> str:
    names = " ".join(tools)
    return (
        "Tool Verification:\n"
        "Before the first use of each external tool, check that it is on the PATH with "
        "'command -v <tool> >/dev/null 2>&1'. If it is missing, print a descriptive error to stderr "
        "naming the tool and how to install it, then 'exit 1'. A helper function such as "
        "'require_tool' is fine.\n"
        f"Tools to verify: {names if names else 'none'}."
    )


def build_fastq_section(options: FastqOptions, input_type: InputFileType, base_name: str) -> str:
    lines = [
        "FASTQ Generation:",
        "- Generate synthetic paired-end FASTQ reads with wgsim using exactly these parameters:",
        f"  - Number of read pairs (-N): {options.num_reads}",
        f"  - Read 1 length (-1): {options.read_length1}",
        f"  - Read 2 length (-2): {options.read_length2}",
        f"  - Base error rate (-e): {options.error_rate}",
        f"  - Mutation rate (-r): {options.mutation_rate}",
        f"  - Outer distance between read ends (-d): {options.insert_size}",
        f"  - Standard deviation of distance (-s): {options.insert_std_dev}",
        f'- Output files: "{base_name}_sim_R1.fastq" and "{base_name}_sim_R2.fastq".',
    ]
    if input_type == InputFileType.VCF:
        lines += [
            "- Primary method: wgsim simulates reads from a FASTA, not from a VCF. Use a "
            'REFERENCE_FASTA variable (default "reference.fa"), exit with a clear message if it '
            "does not exist, and index it with 'samtools faidx' if no .fai is present. If the VCF "
            f"is not bgzipped, compress it with 'bcftools view -Oz -o {base_name}.vcf.gz' and index "
            f"it with 'bcftools index'. Build a variant-bearing sequence with 'bcftools consensus -f "
            f"\"$REFERENCE_FASTA\" <vcf.gz> > {base_name}_consensus.fa', then run wgsim on "
            f"{base_name}_consensus.fa.",
            "- Fallback method: if 'bcftools consensus' fails, print a warning and run wgsim "
            "directly on \"$REFERENCE_FASTA\" with the same parameters.",
        ]
    else:
        lines.append(
            f"- The input is {input_type.value.upper()}, which cannot be converted to FASTQ directly. "
            "Do NOT emit a working command. Instead provide a commented-out 'awk' or Python template "
            "showing how a structured text file could be turned into FASTQ records, and explain in "
            "comments which columns and values the user must adapt."
        )
    return "\n".join(lines)


def _template_step_note(base_name: str) -> str:
    return (
        "- The BED step above is only a commented template for this input, so emit this step as "
        f"commented-out lines as well, wrapped in an 'if [ -f \"{base_name}.bed\" ]' guard so the user "
        "can enable it once the BED file exists. Do NOT emit a working command."
    )


def build_gene_annotation_section(base_name: str, template_only: bool = False) -> str:
    title = "commented-out template" if template_only else "runs immediately after the BED file is written"
    lines = [
        f"Gene Annotation ({title}):",
        f"- Resource: the GENCODE basic gene annotation GTF from {GENE_ANNOTATION_URL} "
        "(GRCh38; tell the user in a comment to swap it for a GRCh37 release when the input uses that build).",
        f'- One-time download: only if "{GENE_ANNOTATION_BED}" does not exist, download '
        f'"{GENE_ANNOTATION_GTF}" with wget and convert gene records to BED with '
        "zcat | awk -F'\\t' '$3==\"gene\"' (columns: chrom, start-1, end, gene_name). "
        "If the download or conversion fails, remove partial files, print a warning and SKIP the "
        "annotation step instead of aborting the script.",
        f'- Command: bedtools intersect -a "{base_name}.bed" -b "{GENE_ANNOTATION_BED}" -wa -wb '
        f'> "{base_name}.annotated.bed"',
        "- Sort both inputs with 'sort -k1,1 -k2,2n' first if intersect reports unsorted input.",
    ]
    if template_only:
        lines.append(_template_step_note(base_name))
    return "\n".join(lines)


def build_igv_snapshot_section(base_name: str, include_annotated: bool, template_only: bool = False) -> str:
    lines = [
        "IGV Snapshot (commented-out template):" if template_only else "IGV Snapshot:",
        "- Resource: IGV desktop (batch mode) with the "
        f"{IGV_GENOME} genome, which IGV fetches itself.",
        f"- One-time download: if 'igv.sh' is not on the PATH and \"{IGV_DIR}/igv.sh\" does not "
        f"exist, download {IGV_URL} with wget and unzip it. If this fails, print a warning and "
        "SKIP snapshot generation instead of aborting the script.",
        "- For each target write a batch file and run it headless with "
        "'xvfb-run --auto-servernum <igv.sh> -b <batch file>'. The batch file contains: new; "
        f"genome {IGV_GENOME}; load <target>; snapshotDirectory .; goto the first interval of the "
        "target; snapshot <target base>_igv.png; exit.",
    ]
    if include_annotated:
        lines.append(
            f'- Generate TWO snapshots: "{base_name}_igv.png" for "{base_name}.bed" right after the '
            f'BED file is written, and "{base_name}.annotated_igv.png" for "{base_name}.annotated.bed" '
            "right after gene annotation finishes (skip it if annotation was skipped)."
        )
    else:
        lines.append(
            f'- Generate ONE snapshot: "{base_name}_igv.png" for "{base_name}.bed", right after the '
            "BED file is written."
        )
    if template_only:
        lines.append(_template_step_note(base_name))
    return "\n".join(lines)


def build_bed_section(options: BedOptions, input_type: InputFileType, base_name: str) -> str:
    end_offset = options.window_size - 1
    awk_command = (
        "awk 'BEGIN{OFS=\"\\t\"} !/^#/ {start=$2-1; if(start<0) start=0; "
        f"print $1, start, $2+{end_offset}, $3}}'"
    )
    lines = ["BED Generation:", f'- Output file: "{base_name}.bed".']

    if input_type == InputFileType.VCF:
        window = (
            f"- Windowed method: build an interval of {options.window_size} bp starting at each "
            f"variant position (start=POS-1 clamped at 0, end=POS+{end_offset}), reading the VCF "
            f"with 'zcat -f' so compressed input works. The awk command should look like: {awk_command}"
        )
        if options.use_end_tag:
            lines += [
                "- Primary method: the VCF is expected to carry an INFO/END tag. Extract intervals with "
                "'bcftools query -f \"%CHROM\\t%POS0\\t%END\\t%ID\\n\"'.",
                "- Fallback method: if the header has no '##INFO=<ID=END' line (check with "
                "'bcftools view -h' and grep), use the windowed method instead and print a note.",
                window,
            ]
        else:
            lines += [
                "- Primary method: do not rely on INFO/END; use the windowed method.",
                window,
            ]
    else:
        lines.append(
            f"- The input is {input_type.value.upper()}, which has no standard variant layout. Do NOT "
            "emit a working command. Provide a commented-out 'awk' template assuming columns such as "
            f"chr and pos, producing {options.window_size} bp intervals, and explain that the user "
            "must adjust the column numbers ($1, $2, ...) to match their file."
        )

    template_only = input_type != InputFileType.VCF
    sections = ["\n".join(lines)]
    if options.annotate_genes:
        sections.append(build_gene_annotation_section(base_name, template_only))
    if options.generate_igv_snapshot:
        sections.append(build_igv_snapshot_section(base_name, options.annotate_genes, template_only))
    return "\n\n".join(sections)


def build_output_contract_section() -> str:
    return (
        "Final Output:\n"
        "- Combine all steps into one script in the order given above.\n"
        f"- Reply with exactly ONE fenced code block tagged '{SCRIPT_LANGUAGE}' "
        f"(```{SCRIPT_LANGUAGE} ... ```) containing the whole script.\n"
        "- Do not write any text before or after the code block; explanations belong in script comments."
    )


def build_prompt(
    source,
    input_type: InputFileType,
    output_types: Sequence[OutputFileType],
    options: ConversionOptions,
) -> str:
    """
    Render the full generation prompt.

    Callers must pass at least one output type and should not submit a
    source with nothing selected; both still render, with empty names.
    """
    return render_prompt(resolve_input_source(source), input_type, output_types, options)


def render_prompt(
    resolved: ResolvedSource,
    input_type: InputFileType,
    output_types: Sequence[OutputFileType],
    options: ConversionOptions,
) -> str:
    """Render the prompt for an already resolved input source."""
    outputs = selected_output_types(output_types)
    tools = required_tools(resolved, input_type, outputs, options)

    sections = [
        build_task_section(resolved, input_type, outputs),
        build_source_section(resolved),
        build_dependency_section(tools),
        build_tool_check_section(tools),
    ]
    if OutputFileType.FASTQ in outputs:
        sections.append(build_fastq_section(options.fastq, input_type, resolved.base_name))
    if OutputFileType.BED in outputs:
        sections.append(build_bed_section(options.bed, input_type, resolved.base_name))
    sections.append(build_output_contract_section())

    return SECTION_SEPARATOR.join(sections) + "\n"
