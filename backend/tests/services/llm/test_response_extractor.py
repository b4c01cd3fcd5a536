"""
Unit tests for script extraction from model replies.
"""

import pytest

from genoscript.services.llm.response_extractor import extract_script, strip_fence_markers


class TestFencedBlock:

    def test_tagged_block_with_prose(self):
        assert extract_script("prefix ```bash\nSCRIPT\n``` suffix") == "SCRIPT"

    @pytest.mark.parametrize("tag", ["bash", "BASH", "Bash", "sh", "shell", "r", "R", ""])
    def test_tag_variants(self, tag):
        raw = f"Here you go:\n```{tag}\n#!/bin/bash\nset -e\necho done\n```\nEnjoy."

        assert extract_script(raw) == "#!/bin/bash\nset -e\necho done"

    def test_first_block_wins(self):
        raw = "```bash\nfirst\n```\ntext\n```bash\nsecond\n```"

        assert extract_script(raw) == "first"

    def test_multiline_interior_trimmed(self):
        raw = "```bash\n\n  echo a\necho b  \n\n```"

        assert extract_script(raw) == "echo a\necho b"


class TestFallback:

    def test_plain_text_returned_trimmed(self):
        assert extract_script("  #!/bin/bash\necho hi\n  ") == "#!/bin/bash\necho hi"

    def test_idempotent_on_clean_input(self):
        clean = "#!/bin/bash\nset -e\necho hi"

        assert extract_script(clean) == clean
        assert extract_script(extract_script(clean)) == clean

    def test_unterminated_fence(self):
        assert extract_script("```bash\necho hi\n") == "echo hi"

    def test_dangling_closing_fence(self):
        assert extract_script("echo hi\n```") == "echo hi"

    def test_tag_line_after_bare_fence(self):
        assert strip_fence_markers("```\nbash\necho hi") == "echo hi"

    @pytest.mark.parametrize("raw", ["R\nlibrary(vcfR)", "sh\nrun.sh", "bash\necho hi"])
    def test_unfenced_tag_like_first_line_kept(self, raw):
        assert extract_script(raw) == raw

    @pytest.mark.parametrize("raw", ["", None])
    def test_empty_input(self, raw):
        assert extract_script(raw) == ""
