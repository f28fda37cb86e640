#!/usr/bin/env python3
"""
ASPIRE2COOLIFY TEST SUITE - Tokenizer
-------------------------------------
Chain extraction, literal awareness and recovery from unbalanced input.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

from aspire2coolify.parser.lexer import (
    ChainLexer, extract_chains, normalize_source, find_closing_paren, parse_args,
    extract_first_string_arg, extract_named_args, skip_generic,
)
from aspire2coolify.parser.pipeline import parse_source
from aspire2coolify.parser.scanner import LambdaScanner


def test_single_chain_with_variable_and_calls():
    chains = extract_chains('var pg = builder.AddPostgres("pg").WithDataVolume().WithHostPort(5432);')

    assert len(chains) == 1
    chain = chains[0]
    assert chain.root_method == "AddPostgres"
    assert chain.name == "pg"
    assert chain.variable_name == "pg"
    assert chain.base_object == "builder"
    assert [c.method for c in chain.chained_methods] == ["WithDataVolume", "WithHostPort"]
    assert chain.chained_methods[1].args == ["5432"]


def test_multiline_chain_and_comments_are_normalized():
    source = """
    // a comment with builder.AddRedis("nope")
    var cache = builder
        .AddRedis("cache")   /* inline */
        .WithHostPort(6379);
    """
    chains = extract_chains(source)

    assert [c.name for c in chains] == ["cache"]
    assert chains[0].chained_methods[0].method == "WithHostPort"


def test_chain_without_variable_has_no_variable_name():
    chains = extract_chains('builder.AddNpmApp("web", "../Web").WithReference(db);')
    assert chains[0].variable_name is None
    assert chains[0].root_args == ['"web"', '"../Web"']


def test_generic_root_call_is_read():
    chains = extract_chains('builder.AddProject<Projects.Api>("api").WithExternalHttpEndpoints();')
    assert chains[0].root_method == "AddProject"
    assert chains[0].name == "api"
    assert "Projects.Api" in chains[0].raw


def test_parentheses_inside_strings_do_not_break_chains():
    source = 'builder.AddContainer("odd", "img").WithEnvironment("MSG", "a ) b ( c; d").WithHostPort(1);'
    chains = extract_chains(source)

    assert len(chains) == 1
    env_call = chains[0].chained_methods[0]
    assert env_call.args == ['"MSG"', '"a ) b ( c; d"']
    assert chains[0].chained_methods[1].method == "WithHostPort"


def test_comment_markers_inside_strings_survive():
    chains = extract_chains('builder.AddContainer("c", "img").WithEnvironment("URL", "http://x/*y*/");')
    assert chains[0].chained_methods[0].args[1] == '"http://x/*y*/"'


def test_unbalanced_chain_is_skipped_and_scan_continues():
    lexer = ChainLexer()
    source = 'var a = builder.AddRedis("a").WithHostPort(6379;\nvar b = builder.AddSeq("b");'
    chains = lexer.extract_chains(source)

    assert [c.name for c in chains] == ["b"]
    assert len(lexer.skipped) == 1


def test_unbalanced_chain_is_reported_as_parse_error():
    result = parse_source('builder.AddPostgres("pg".WithDataVolume();\nbuilder.AddSeq("logs");')

    assert not result.ok
    assert len(result.errors) == 1
    assert result.errors[0].message == "Unbalanced chain skipped"
    assert result.errors[0].context.startswith('builder.AddPostgres("pg"')
    assert [s.name for s in result.app.services] == ["logs"]
    assert result.app.databases == []


def test_empty_and_chainless_input():
    assert extract_chains("") == []
    assert extract_chains("var builder = DistributedApplication.CreateBuilder(args);\nbuilder.Build().Run();") == []


def test_bom_and_crlf_are_tolerated():
    chains = extract_chains('\ufeffvar s = builder.AddSeq("logs")\r\n    .WithHostPort(5341);\r\n')
    assert chains[0].name == "logs"


def test_normalize_source_keeps_literals_verbatim():
    text = normalize_source('x   =   "a   b" ;  y=>y')
    assert '"a   b"' in text
    assert "x = " in text
    assert "y => y" in text


def test_find_closing_paren():
    text = 'f(a, (b), ")")'
    assert find_closing_paren(text, 1) == len(text) - 1
    assert find_closing_paren("f(a, (b)", 1) == -1
    assert find_closing_paren("f(a]", 1) == -1


def test_parse_args_splits_on_top_level_commas_only():
    assert parse_args('"a,b", f(1, 2), x => x.Y(3, 4)') == ['"a,b"', "f(1, 2)", "x => x.Y(3, 4)"]
    assert parse_args("   ") == []


def test_string_and_named_argument_helpers():
    assert extract_first_string_arg('port: 5, "first", "second"') == "first"
    assert extract_first_string_arg("no strings") is None
    assert extract_named_args(['3000', 'env: "PORT"', '"x: y"']) == {"env": "PORT"}


def test_skip_generic():
    assert skip_generic("<A<B>> (", 0) == 7
    assert skip_generic("(x)", 0) == 0
    assert skip_generic("<A(", 0) == -1


def test_lambda_scanner_reads_nested_calls():
    scanner = LambdaScanner()
    calls = scanner.scan('c => c .WithImage("postgres") .WithHostPort(5432) ')
    assert [c.method for c in calls] == ["WithImage", "WithHostPort"]

    calls = scanner.scan('(c, ct) => c.WithDataVolume()')
    assert [c.method for c in calls] == ["WithDataVolume"]


def test_lambda_scanner_rejects_non_lambdas_and_foreign_receivers():
    scanner = LambdaScanner()
    assert scanner.scan('"just a string"') == []
    assert scanner.scan("c => other.WithImage(\"x\")") == []
    assert scanner.scan(None) == []


def test_lambda_scanner_depth_guard():
    scanner = LambdaScanner(max_depth=1)
    assert scanner.scan('c => c.WithDataVolume()', depth=1) == []


def test_lambda_scanner_malformed_body_keeps_calls_read_so_far():
    calls = LambdaScanner().scan('c => c.WithImage("pg").WithHostPort(5432')
    assert [c.method for c in calls] == ["WithImage"]
