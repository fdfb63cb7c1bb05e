
# lark grammar for the supported subset of sql
GRAMMAR = '''
        program          : stmnt
                         | terminated

        ?terminated      : stmnt ";"
        ?stmnt           : select_stmnt

        // only single-source selects without any clauses are supported
        select_stmnt     : select_clause from_clause
        select_clause    : "select"i selectable ("," selectable)*
        selectable       : count_star
                         | star
                         | column_name

        from_clause      : "from"i table_name

        count_star       : "count"i "(" "*" ")"
        star             : "*"

        column_name      : IDENTIFIER
                         | QUOTED_IDENTIFIER
        table_name       : IDENTIFIER
                         | QUOTED_IDENTIFIER

        IDENTIFIER        : /[A-Za-z_][A-Za-z0-9_]*/
        // NOTE: this doesn't have any support for escaping
        QUOTED_IDENTIFIER : /"[^"]+"/

        %import common.WS
        %ignore WS
'''
