from wspace.lexer import tokenize, token_to_string, Lexer, Token, TokenType

S, T, N, END = TokenType.SPACE, TokenType.TAB, TokenType.NEWLINE, TokenType.END

def types(tokens):
    return [t.type for t in tokens]

def testSignificantCharacters():
    assert [S, T, N, END] == types(tokenize(" \t\n"))

def testEverythingElseIsDropped():
    source = "push\r 1 \t[comment]\n\x00\x0b\x0c"
    assert [S, S, T, N, END] == types(tokenize(source))

def testEmptyInput():
    tokens = tokenize("")
    assert [END] == types(tokens)
    assert (1, 1) == (tokens[0].line, tokens[0].col)

def testOneTokenPerWhitespaceInOrder():
    source = "a\tb  c\n\n d\t"
    tokens = tokenize(source)
    assert [T, S, S, N, N, S, T, END] == types(tokens)
    assert 1 == types(tokens).count(END)
    assert len([c for c in source if c in " \t\n"]) == len(tokens) - 1

def testPositions():
    tokens = tokenize("a \n\t")
    assert Token(S, 1, 2) == tokens[0]
    assert Token(N, 1, 3) == tokens[1]
    assert Token(T, 2, 1) == tokens[2]
    assert Token(END, 2, 2) == tokens[3]

def testBytesInput():
    # bytes above 0x7f are not valid utf-8 here but must not fail
    assert [S, T, N, END] == types(tokenize(b"\xff \xfe\t\x80\n"))

def testLexerClass():
    assert [N, END] == types(Lexer("x\n").tokenize())

def testTokenToString():
    assert "[TAB]" == token_to_string(TokenType.TAB)
    assert "[END]" == token_to_string(tokenize("")[0])
    assert "Token(SPACE, 1:1)" == repr(tokenize(" ")[0])
