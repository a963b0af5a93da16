"""
Compiler Driver Tests
=====================

Tests for C4Compiler and the compile_file convenience function.
"""

import pytest
from pyc4.compiler import C4Compiler, CompilerOptions, compile_file
from pyc4.compiler.compiler import CompilerResult
from pyc4.compiler.errors import CompileError, MissingTokenError
from pyc4.compiler.instructions import imm, MUL, PRTF


class TestC4Compiler:
    """Tests for the C4Compiler class."""

    def test_compile_source(self):
        result = C4Compiler().compile_source("printf(6 * 7);", "answer.c")
        assert isinstance(result, CompilerResult)
        assert result.success
        assert result.filename == "answer.c"
        assert result.instructions == (imm(6), imm(7), MUL, PRTF)
        # printf ( 6 * 7 ) ; EOF
        assert result.token_count == 8
        assert result.listing == "IMM 6\nIMM 7\nMUL\nPRTF\n"

    def test_compile_file(self, tmp_path):
        source = tmp_path / "answer.c"
        source.write_text("printf(6 * 7);\n")
        result = C4Compiler().compile_file(source)
        assert result.filename == str(source)
        assert result.instructions == (imm(6), imm(7), MUL, PRTF)

    def test_compile_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            C4Compiler().compile_file(tmp_path / "missing.c")

    def test_compile_file_error(self, tmp_path):
        """Compile errors name the source file."""
        source = tmp_path / "bad.c"
        source.write_text("return 1\n")
        with pytest.raises(MissingTokenError) as exc_info:
            C4Compiler().compile_file(source)
        assert str(source) in str(exc_info.value)

    def test_options_depth(self):
        compiler = C4Compiler(CompilerOptions(max_expression_depth=1))
        with pytest.raises(CompileError):
            compiler.compile_source("printf(1 + 2);")


class TestCompileFile:
    """Tests for the module-level compile_file function."""

    def test_returns_program(self, tmp_path):
        source = tmp_path / "prog.c"
        source.write_text("printf(6 * 7);\n")
        assert compile_file(source) == (imm(6), imm(7), MUL, PRTF)

    def test_writes_listing(self, tmp_path):
        source = tmp_path / "prog.c"
        source.write_text("printf(6 * 7);\nreturn 0;\n")
        target = tmp_path / "prog.lst"
        compile_file(source, target)
        assert target.read_text() == "IMM 6\nIMM 7\nMUL\nPRTF\nIMM 0\nLEV\n"

    def test_no_listing_without_output_path(self, tmp_path):
        source = tmp_path / "prog.c"
        source.write_text("printf(1);\n")
        compile_file(source)
        assert not (tmp_path / "prog.lst").exists()

    def test_missing_source(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            compile_file(tmp_path / "missing.c", tmp_path / "out.lst")
        assert not (tmp_path / "out.lst").exists()

    def test_compile_error_writes_nothing(self, tmp_path):
        source = tmp_path / "bad.c"
        source.write_text("printf(2 + 3;\n")
        target = tmp_path / "bad.lst"
        with pytest.raises(CompileError):
            compile_file(source, target)
        assert not target.exists()
