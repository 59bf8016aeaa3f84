# pylint: disable=C0301

import argparse
import sys

from . import __version__ as tool_version
from .helpers import bco, print_error


def msg(name=None):
    str_msg = f'''
\00
{bco.Cyan}Program:{bco.ResetAll} ncbitaxonomy - work with a local copy of the NCBI Taxonomy database
{bco.Cyan}Version:{bco.ResetAll} '''+tool_version+f'''

{bco.Cyan}Usage:{bco.ResetAll} ncbitaxonomy <command> [options]

{bco.Cyan}Command:{bco.ResetAll}
 {bco.LightGreen}-- Database{bco.ResetAll}
      {bco.LightBlue}to_sqlite{bco.ResetAll}                 Save the taxonomy dump files to a SQLite database

 {bco.LightGreen}-- Queries{bco.ResetAll}
      {bco.LightBlue}get_id{bco.ResetAll}                    Find the taxonomy ID for a name
      {bco.LightBlue}get_name{bco.ResetAll}                  Find the name for a taxonomy ID
      {bco.LightBlue}get_lineage{bco.ResetAll}               Lineage of a taxon, up to the root
      {bco.LightBlue}get_descendants{bco.ResetAll}           Taxonomy IDs of a taxon and all taxa below it
      {bco.LightBlue}common_ancestor_distance{bco.ResetAll}  Tree distance between two taxa, and their common ancestor

 {bco.LightGreen}-- Filters{bco.ResetAll}
      {bco.LightBlue}filter_fasta{bco.ResetAll}              Keep the (RefSeq) FASTA records below an ancestor
      {bco.LightBlue}filter_fastq{bco.ResetAll}              Keep the FASTQ reads classified below an ancestor (Kraken2/Centrifuge)

Type ncbitaxonomy <command> to print the help for a specific command
        '''
    return str_msg


class CapitalisedHelpFormatter(argparse.HelpFormatter):
    def add_usage(self, usage, actions, groups, prefix=None):
        if prefix is None:
            prefix = ''
        return super(CapitalisedHelpFormatter, self).add_usage(usage, actions, groups, prefix)


COMMANDS = [
    'to_sqlite', 'get_id', 'get_name', 'get_lineage', 'get_descendants', 'common_ancestor_distance',
    'filter_fasta', 'filter_fastq',
]


def get_args(argv=None):
    parser = argparse.ArgumentParser(usage=msg(), formatter_class=CapitalisedHelpFormatter, add_help=False)
    parser.add_argument('command', action="store", default=None, help='mode to run ncbitaxonomy', choices=COMMANDS)
    parser.add_argument('values', nargs='*', default=[], help='taxon names or IDs, or input files')
    parser.add_argument('-d', '--db', action="store", dest='database', default=None, help='SQLite taxonomy database (default: $NCBITAXONOMY_DB or taxonomy.sqlite)')
    parser.add_argument('-T', '--taxdir', action="store", dest='taxonomy_dir', default=None, help='directory containing the NCBI taxonomy nodes.dmp and names.dmp files')
    parser.add_argument('-t', '--tax_prefix', action="store", dest='tax_prefix', default="", help='string to prepend to names of nodes.dmp and names.dmp')
    parser.add_argument('-o', action="store", dest='output', default=None, help='output file (filter_fasta) or output directory (filter_fastq)')
    parser.add_argument('-f', action='store_true', dest='force_rewrite', help='Set if you want to rewrite the output, even if it exists')
    parser.add_argument('-v', action='store', type=int, default=3, dest='verbose', help='Verbose levels', choices=list(range(1, 5)))
    parser.add_argument('-A', action="store", dest='ancestor', default=None, help='ancestor to filter for (name for filter_fasta, taxonomy ID for filter_fastq)')
    parser.add_argument('-F', action="store", dest='tax_report', default=None, help='classification report from Kraken2 or Centrifuge')
    parser.add_argument('-a', action="store", dest='accession2taxid', default=None, help='accession to taxid table for filter_fasta')
    parser.add_argument('-S', '--show_names', action='store_true', dest='show_names', help='show taxon names in the lineage, not just IDs')
    parser.add_argument('-D', '--delimiter', action="store", dest='delimiter', default=";", help='delimiter for the lineage string')
    parser.add_argument('--only_canonical', action='store_true', dest='only_canonical', help='only consider canonical taxonomic ranks')
    parser.add_argument('--no_curated', action='store_true', dest='no_curated', help='exclude curated RefSeq accessions (NM_, NP_, ...)')
    parser.add_argument('--no_predicted', action='store_true', dest='no_predicted', help='exclude predicted RefSeq accessions (XM_, XP_, XR_)')
    parser.add_argument('--skip_unmapped', action='store_true', dest='skip_unmapped', help='skip reads missing from the report instead of failing')
    parser.add_argument('--stdout', action='store_true', dest='to_stdout', help='write the filtered reads of a single FASTQ file to stdout')

    report_format = parser.add_mutually_exclusive_group()
    report_format.add_argument('-K', '--kraken2', action='store_const', dest='report_format', const='kraken2', help='the report is Kraken2 output (default)')
    report_format.add_argument('-C', '--centrifuge', action='store_const', dest='report_format', const='centrifuge', help='the report is Centrifuge output')
    parser.set_defaults(report_format='kraken2')

    parser.add_argument('--version', action='version', version='%(prog)s {0} on python {1}'.format(tool_version, sys.version.split()[0]))

    return parser.parse_args(argv)


def handle_error(error, help_f=None):
    if help_f:
        help_f()
    print_error()
    print(error, file=sys.stderr)
    sys.exit(1)


def _taxonomy_source_options():
    sys.stderr.write(f"  {bco.LightBlue}-d{bco.ResetAll}  FILE  SQLite taxonomy database {bco.LightMagenta}[$NCBITAXONOMY_DB or taxonomy.sqlite]{bco.ResetAll}\n")
    sys.stderr.write(f"  {bco.LightBlue}-T{bco.ResetAll}  DIR   read the taxonomy from nodes.dmp/names.dmp in DIR instead\n")
    sys.stderr.write(f"  {bco.LightBlue}-t{bco.ResetAll}  STR   prefix of the dump file names {bco.LightMagenta}[\"\"]{bco.ResetAll}\n")
    sys.stderr.write(f"  {bco.LightBlue}-v{bco.ResetAll}  INT   verbose level: 1=error, 2=warning, 3=message, 4+=debugging {bco.LightMagenta}[3]{bco.ResetAll}\n\n")


def print_menu_to_sqlite():
    sys.stderr.write("\n")
    sys.stderr.write(f"{bco.Cyan}Usage:{bco.ResetAll} {bco.Green}ncbitaxonomy{bco.ResetAll} to_sqlite {bco.LightBlue}-T{bco.ResetAll} <taxonomy_dir> [options]\n\n")
    sys.stderr.write(f"  {bco.LightBlue}-T{bco.ResetAll}  DIR   directory with nodes.dmp and names.dmp {bco.LightMagenta}[required]{bco.ResetAll}\n")
    sys.stderr.write(f"  {bco.LightBlue}-t{bco.ResetAll}  STR   prefix of the dump file names {bco.LightMagenta}[\"\"]{bco.ResetAll}\n")
    sys.stderr.write(f"  {bco.LightBlue}-d{bco.ResetAll}  FILE  SQLite database to create {bco.LightMagenta}[$NCBITAXONOMY_DB or taxonomy.sqlite]{bco.ResetAll}\n")
    sys.stderr.write(f"  {bco.LightBlue}-f{bco.ResetAll}        replace the taxa already in the database\n")
    sys.stderr.write(f"  {bco.LightBlue}-v{bco.ResetAll}  INT   verbose level: 1=error, 2=warning, 3=message, 4+=debugging {bco.LightMagenta}[3]{bco.ResetAll}\n\n")


def print_menu_get_id():
    sys.stderr.write("\n")
    sys.stderr.write(f"{bco.Cyan}Usage:{bco.ResetAll} {bco.Green}ncbitaxonomy{bco.ResetAll} get_id <name> [options]\n\n")
    _taxonomy_source_options()


def print_menu_get_name():
    sys.stderr.write("\n")
    sys.stderr.write(f"{bco.Cyan}Usage:{bco.ResetAll} {bco.Green}ncbitaxonomy{bco.ResetAll} get_name <taxid> [options]\n\n")
    _taxonomy_source_options()


def print_menu_get_lineage():
    sys.stderr.write("\n")
    sys.stderr.write(f"{bco.Cyan}Usage:{bco.ResetAll} {bco.Green}ncbitaxonomy{bco.ResetAll} get_lineage <name> [options]\n\n")
    sys.stderr.write(f"  {bco.LightBlue}-S{bco.ResetAll}        show taxon names, not just IDs\n")
    sys.stderr.write(f"  {bco.LightBlue}-D{bco.ResetAll}  STR   delimiter for the lineage string {bco.LightMagenta}[;]{bco.ResetAll}\n")
    _taxonomy_source_options()


def print_menu_get_descendants():
    sys.stderr.write("\n")
    sys.stderr.write(f"{bco.Cyan}Usage:{bco.ResetAll} {bco.Green}ncbitaxonomy{bco.ResetAll} get_descendants <taxid> [options]\n\n")
    _taxonomy_source_options()


def print_menu_common_ancestor_distance():
    sys.stderr.write("\n")
    sys.stderr.write(f"{bco.Cyan}Usage:{bco.ResetAll} {bco.Green}ncbitaxonomy{bco.ResetAll} common_ancestor_distance <name1> <name2> [options]\n\n")
    sys.stderr.write(f"      {bco.LightBlue}--only_canonical{bco.ResetAll}  only consider canonical taxonomic ranks\n")
    _taxonomy_source_options()
    sys.stderr.write(f"{bco.Cyan}Output:{bco.ResetAll} <distance>\\t<common ancestor name>\n\n")


def print_menu_filter_fasta():
    sys.stderr.write("\n")
    sys.stderr.write(f"{bco.Cyan}Usage:{bco.ResetAll} {bco.Green}ncbitaxonomy{bco.ResetAll} filter_fasta <input_fasta> {bco.LightBlue}-A{bco.ResetAll} <ancestor_name> [options]\n\n")
    sys.stderr.write(f"  {bco.LightBlue}-A{bco.ResetAll}  STR   name of the ancestor to filter for {bco.LightMagenta}[required]{bco.ResetAll}\n")
    sys.stderr.write("        (taxa sharing a scientific name go by their NCBI unique name, e.g. \"Bacteria <bacteria>\")\n")
    sys.stderr.write(f"  {bco.LightBlue}-o{bco.ResetAll}  FILE  output FASTA file {bco.LightMagenta}[stdout]{bco.ResetAll}\n")
    sys.stderr.write(f"  {bco.LightBlue}-a{bco.ResetAll}  FILE  accession2taxid table (otherwise the [organism] in the description is used) {bco.LightMagenta}[None]{bco.ResetAll}\n")
    sys.stderr.write(f"      {bco.LightBlue}--no_curated{bco.ResetAll}   exclude curated accessions (NM_, NP_, NR_, ...)\n")
    sys.stderr.write(f"      {bco.LightBlue}--no_predicted{bco.ResetAll} exclude predicted accessions (XM_, XP_, XR_)\n")
    sys.stderr.write(f"  {bco.LightBlue}-f{bco.ResetAll}        force to rewrite output file\n")
    _taxonomy_source_options()


def print_menu_filter_fastq():
    sys.stderr.write("\n")
    sys.stderr.write(f"{bco.Cyan}Usage:{bco.ResetAll} {bco.Green}ncbitaxonomy{bco.ResetAll} filter_fastq <input_fastq> [<input_fastq> ...] {bco.LightBlue}-A{bco.ResetAll} <ancestor_taxid>\n")
    sys.stderr.write(f"                    {bco.LightBlue}-F{bco.ResetAll} <report> [{bco.LightBlue}-K{bco.ResetAll}|{bco.LightBlue}-C{bco.ResetAll}] [options]\n\n")
    sys.stderr.write(f"  {bco.LightBlue}-A{bco.ResetAll}  INT   taxonomy ID of the ancestor to filter for {bco.LightMagenta}[required]{bco.ResetAll}\n")
    sys.stderr.write(f"  {bco.LightBlue}-F{bco.ResetAll}  FILE  classification report {bco.LightMagenta}[required]{bco.ResetAll}\n")
    sys.stderr.write(f"  {bco.LightBlue}-K{bco.ResetAll}        the report is Kraken2 output {bco.LightMagenta}[default]{bco.ResetAll}\n")
    sys.stderr.write(f"  {bco.LightBlue}-C{bco.ResetAll}        the report is Centrifuge output\n")
    sys.stderr.write(f"  {bco.LightBlue}-o{bco.ResetAll}  DIR   output directory {bco.LightMagenta}[next to each input]{bco.ResetAll}\n")
    sys.stderr.write(f"      {bco.LightBlue}--stdout{bco.ResetAll}        write the reads of a single input to stdout\n")
    sys.stderr.write(f"      {bco.LightBlue}--skip_unmapped{bco.ResetAll} skip reads missing from the report instead of failing\n")
    sys.stderr.write(f"  {bco.LightBlue}-f{bco.ResetAll}        force to rewrite output files\n")
    _taxonomy_source_options()
    sys.stderr.write(f"{bco.Cyan}Note:{bco.ResetAll} reads.R1.fastq.gz is written to <output_dir>/reads.filtered.R1.fastq.gz\n\n")
