#!/usr/bin/env python
import sys

from . import database
from .accession import read_accession2taxid
from .errors import NcbiTaxonomyError
from .filters import (
    FastaFilterConfig, FastqFilterConfig, UnmappedPolicy,
    filter_fasta, filter_fastq, filtered_output_name
)
from .helpers import check_file_exists, check_file_doesnt_exists, setup_logging
from .reports import ReportFormat
from .taxonomy import NcbiTaxonomy

from .handle_args import (
    get_args, handle_error,
    print_menu_to_sqlite, print_menu_get_id, print_menu_get_name, print_menu_get_lineage,
    print_menu_get_descendants, print_menu_common_ancestor_distance, print_menu_filter_fasta,
    print_menu_filter_fastq
    )


def load_taxonomy(args):
    # dump files (-T) take precedence over the database
    if args.taxonomy_dir:
        return NcbiTaxonomy.from_ncbi_dir(args.taxonomy_dir, args.tax_prefix)
    return database.load_taxonomy(args.database)


def parse_taxid(value, help_f):
    try:
        return int(value)
    except ValueError:
        handle_error(f"taxonomy ID should be an integer, found: {value}", help_f)


def run_to_sqlite(args):
    if not args.taxonomy_dir:
        handle_error("missing <taxonomy_dir> (-T)", print_menu_to_sqlite)
    database.dump_to_sqlite(
        args.taxonomy_dir, args.database, tax_prefix=args.tax_prefix, force=args.force_rewrite
    )


def run_get_id(args):
    if len(args.values) != 1:
        handle_error("expected exactly one <name>", print_menu_get_id)
    name = args.values[0]
    if args.taxonomy_dir:
        taxon_id = load_taxonomy(args).get_id(name)
    else:
        with database.TaxonomyDatabase(args.database) as db:
            taxon_id = db.get_id_by_name(name)
    print(taxon_id)


def run_get_name(args):
    if len(args.values) != 1:
        handle_error("expected exactly one <taxid>", print_menu_get_name)
    taxon_id = parse_taxid(args.values[0], print_menu_get_name)
    if args.taxonomy_dir:
        name = load_taxonomy(args).get_name(taxon_id)
    else:
        with database.TaxonomyDatabase(args.database) as db:
            name = db.get_name_by_id(taxon_id)
    print(name)


def run_get_lineage(args):
    if len(args.values) != 1:
        handle_error("expected exactly one <name>", print_menu_get_lineage)
    name = args.values[0]
    if args.taxonomy_dir:
        taxonomy = load_taxonomy(args)
    else:
        with database.TaxonomyDatabase(args.database) as db:
            taxonomy = db.load_lineages([name])
    lineage = taxonomy.lineage_of(name)
    if args.show_names:
        print(args.delimiter.join(f"{node.name} ({node.id})" for node in lineage))
    else:
        print(args.delimiter.join(str(taxon_id) for taxon_id in lineage.ids()))


def run_get_descendants(args):
    if len(args.values) != 1:
        handle_error("expected exactly one <taxid>", print_menu_get_descendants)
    taxon_id = parse_taxid(args.values[0], print_menu_get_descendants)
    if args.taxonomy_dir:
        descendants = sorted(load_taxonomy(args).traversal(taxon_id))
    else:
        with database.TaxonomyDatabase(args.database) as db:
            descendants = db.descendant_ids(taxon_id)
    for descendant_id in descendants:
        print(descendant_id)


def run_common_ancestor_distance(args):
    if len(args.values) != 2:
        handle_error("expected two names: <name1> <name2>", print_menu_common_ancestor_distance)
    name1, name2 = args.values
    if args.taxonomy_dir:
        taxonomy = load_taxonomy(args)
    else:
        with database.TaxonomyDatabase(args.database) as db:
            taxonomy = db.load_lineages([name1, name2])
    distance, common_ancestor = taxonomy.get_distance_to_common_ancestor(name1, name2, args.only_canonical)
    print(f"{distance}\t{common_ancestor}")


def run_filter_fasta(args):
    if len(args.values) != 1:
        handle_error("expected exactly one <input_fasta>", print_menu_filter_fasta)
    if not args.ancestor:
        handle_error("missing <ancestor_name> (-A)", print_menu_filter_fasta)
    input_fasta = args.values[0]
    if input_fasta != "-":
        check_file_exists(input_fasta, isfasta=True)
    if args.accession2taxid:
        check_file_exists(args.accession2taxid, isfasta=False)
    if args.output and not args.force_rewrite:
        check_file_doesnt_exists(args.output)

    config = FastaFilterConfig(exclude_curated=args.no_curated, exclude_predicted=args.no_predicted)
    taxonomy = load_taxonomy(args)
    accession_taxids = read_accession2taxid(args.accession2taxid) if args.accession2taxid else None
    filter_fasta(
        taxonomy, input_fasta, args.ancestor, output=args.output, config=config,
        accession_taxids=accession_taxids
    )


def run_filter_fastq(args):
    if not args.values:
        handle_error("missing <input_fastq>", print_menu_filter_fastq)
    if not args.ancestor:
        handle_error("missing <ancestor_taxid> (-A)", print_menu_filter_fastq)
    if not args.tax_report:
        handle_error("missing <report> (-F)", print_menu_filter_fastq)
    if args.to_stdout and len(args.values) > 1:
        handle_error("--stdout can only be used with a single <input_fastq>", print_menu_filter_fastq)
    ancestor_taxid = parse_taxid(args.ancestor, print_menu_filter_fastq)

    for fastq_file in args.values:
        check_file_exists(fastq_file, isfasta=False)
    check_file_exists(args.tax_report, isfasta=False)
    if not args.to_stdout and not args.force_rewrite:
        for fastq_file in args.values:
            check_file_doesnt_exists(filtered_output_name(fastq_file, args.output))

    config = FastqFilterConfig(
        report_format=ReportFormat(args.report_format),
        unmapped_policy=UnmappedPolicy.SKIP if args.skip_unmapped else UnmappedPolicy.FAIL,
    )
    taxonomy = load_taxonomy(args)
    filter_fastq(
        taxonomy, args.values, ancestor_taxid, args.tax_report, output_dir=args.output,
        config=config, to_stdout=args.to_stdout
    )


def main(argv=None):

    args = get_args(argv)

    setup_logging(args.verbose)

    routines = {
        "to_sqlite": run_to_sqlite,
        "get_id": run_get_id,
        "get_name": run_get_name,
        "get_lineage": run_get_lineage,
        "get_descendants": run_get_descendants,
        "common_ancestor_distance": run_common_ancestor_distance,
        "filter_fasta": run_filter_fasta,
        "filter_fastq": run_filter_fastq,
    }

    run_routine = routines.get(args.command)
    if run_routine is None:
        raise ValueError(f"Subroutine {args.command} is unknown.")

    try:
        run_routine(args)
    except NcbiTaxonomyError as e:
        handle_error(f"{type(e).__name__}: {e}", None)

    return 0


if __name__ == '__main__':
    sys.exit(main())
