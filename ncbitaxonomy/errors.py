"""
Errors raised while loading, indexing and querying the taxonomy
"""


class NcbiTaxonomyError(Exception):
    pass


class DuplicateName(NcbiTaxonomyError, ValueError):
    def __init__(self, name, taxon_id):
        self.name = name
        self.taxon_id = taxon_id
        super().__init__(f"name '{name}' (taxid {taxon_id}) is already present in the taxonomy")


class DuplicateId(NcbiTaxonomyError, ValueError):
    def __init__(self, taxon_id):
        self.taxon_id = taxon_id
        super().__init__(f"taxid {taxon_id} is already present in the taxonomy")


class MalformedTaxonomy(NcbiTaxonomyError, ValueError):
    def __init__(self, message, taxon_id=None):
        self.taxon_id = taxon_id
        super().__init__(message)


class DumpFormatError(MalformedTaxonomy):
    def __init__(self, file_name, line_no=None, line=None):
        self.file_name = file_name
        self.line_no = line_no
        where = f" in line {line_no}" if line_no is not None else ""
        super().__init__(f"format error in {file_name}{where}: {line}")


class NotFound(NcbiTaxonomyError, LookupError):
    def __init__(self, key, kind="taxon", suggestions=()):
        self.key = key
        self.kind = kind
        self.suggestions = list(suggestions)
        hint = ""
        if self.suggestions:
            hint = " (did you mean " + " or ".join(repr(name) for name in self.suggestions) + "?)"
        super().__init__(f"{kind} {key!r} not found in taxonomy{hint}")


class UnmappedRead(NcbiTaxonomyError):
    def __init__(self, read_id, file_name=None):
        self.read_id = read_id
        self.file_name = file_name
        where = f" (in {file_name})" if file_name else ""
        super().__init__(f"read {read_id}{where} is not present in the classification report")


class TaxonomyIOError(NcbiTaxonomyError, OSError):
    def __init__(self, message, file_name=None):
        self.file_name = file_name
        super().__init__(message)


class SequenceFormatError(NcbiTaxonomyError, ValueError):
    def __init__(self, file_name, record_no, message):
        self.file_name = file_name
        self.record_no = record_no
        where = f", record {record_no}" if record_no is not None else ""
        super().__init__(f"{file_name}{where}: {message}")


class ReportFormatError(NcbiTaxonomyError, ValueError):
    def __init__(self, file_name, message):
        self.file_name = file_name
        super().__init__(f"classification report {file_name}: {message}")
