"""
Shell completion scripts.

Besides the options, the scripts offer the module paths required by the
go.mod in the current directory as values for the partial name. Indirect
requirements and modules that already have a replace directive are left out.
"""

from typing import Dict

_MODULES_FROM_GO_MOD = (
    # First pass collects replaced modules, second pass prints the rest
    r"""awk 'NR==FNR{if($1=="replace"&&$3=="=>")r[$2]=1;next} """
    r"""/^require \(/{b=1;next} b&&/^\)/{b=0} """
    r"""b&&!/indirect/&&!($1 in r){print $1} """
    r"""/^require [^(]/&&!/indirect/&&!($2 in r){print $2}' go.mod go.mod 2>/dev/null"""
)


def get_bash_completion() -> str:
    """Bash completion script."""
    return r"""
# Bash completion for goreplace
_goreplace_completion() {
    local cur prev opts
    COMPREPLY=()
    cur="${COMP_WORDS[COMP_CWORD]}"
    prev="${COMP_WORDS[COMP_CWORD-1]}"

    case "${prev}" in
        --go-mod)
            COMPREPLY=( $(compgen -f -- ${cur}) )
            return 0
            ;;
        --gopath)
            COMPREPLY=( $(compgen -d -- ${cur}) )
            return 0
            ;;
        --completion)
            COMPREPLY=( $(compgen -W "bash zsh fish" -- ${cur}) )
            return 0
            ;;
    esac

    if [[ ${cur} == -* ]]; then
        opts="--go-mod --gopath --verbose --completion --version --help"
        COMPREPLY=( $(compgen -W "${opts}" -- ${cur}) )
        return 0
    fi

    local modules=$(""" + _MODULES_FROM_GO_MOD + r""")
    COMPREPLY=( $(compgen -W "${modules}" -- ${cur}) )
    return 0
}

complete -F _goreplace_completion goreplace
"""


def get_zsh_completion() -> str:
    """Zsh completion script."""
    return r"""
#compdef goreplace

_goreplace_modules() {
    local -a modules
    modules=(${(f)"$(""" + _MODULES_FROM_GO_MOD + r""")"})
    _describe 'module' modules
}

_goreplace() {
    _arguments \
        '--go-mod[Path to the go.mod file]:file:_files' \
        '--gopath[Workspace holding src/<module> checkouts]:directory:_directories' \
        '(-v --verbose)'{-v,--verbose}'[Enable debug logging]' \
        '--completion[Print a shell completion script]:shell:(bash zsh fish)' \
        '--version[Show version information]' \
        '(-h --help)'{-h,--help}'[Show help]' \
        '1:partial package name:_goreplace_modules'
}

_goreplace "$@"
"""


def get_fish_completion() -> str:
    """Fish completion script."""
    return r"""
# Fish completion for goreplace

complete -c goreplace -l go-mod -d 'Path to the go.mod file' -r -F
complete -c goreplace -l gopath -d 'Workspace holding src/<module> checkouts' -x -a "(__fish_complete_directories)"
complete -c goreplace -s v -l verbose -d 'Enable debug logging'
complete -c goreplace -l completion -d 'Print a shell completion script' -x -a 'bash zsh fish'
complete -c goreplace -l version -d 'Show version'
complete -c goreplace -s h -l help -d 'Show help'

function __goreplace_modules
    """ + _MODULES_FROM_GO_MOD + r"""
end

complete -c goreplace -f -a '(__goreplace_modules)'
"""


def get_completion_scripts() -> Dict[str, str]:
    """Return all completion scripts."""
    return {
        "bash": get_bash_completion(),
        "zsh": get_zsh_completion(),
        "fish": get_fish_completion(),
    }
