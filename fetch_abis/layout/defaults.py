"""Built-in Mira v1 layout.

Core provides the AMM contract; periphery provides the liquidity and
swap scripts.
"""

from fetch_abis.layout.schema import ArtifactSchema, LayoutSchema, RepositorySchema

MIRA_V1_CORE_URL = "git@github.com:mira-amm/mira-v1-core.git"
MIRA_V1_PERIPHERY_URL = "git@github.com:mira-amm/mira-v1-periphery.git"

PERIPHERY_SCRIPTS = (
    "add_liquidity_script",
    "create_pool_and_add_liquidity_script",
    "remove_liquidity_script",
    "swap_exact_input_script",
    "swap_exact_output_script",
)


def mira_v1_layout() -> LayoutSchema:
    """Return the default layout for Mira v1 core and periphery."""
    return LayoutSchema(
        repositories=[
            RepositorySchema(name="mira-v1-core", url=MIRA_V1_CORE_URL),
            RepositorySchema(name="mira-v1-periphery", url=MIRA_V1_PERIPHERY_URL),
        ],
        artifacts=[
            ArtifactSchema(
                name="mira_amm_contract",
                repository="mira-v1-core",
                project_path="contracts/mira_amm_contract",
            ),
            *(
                ArtifactSchema(
                    name=script,
                    repository="mira-v1-periphery",
                    project_path=f"scripts/{script}",
                )
                for script in PERIPHERY_SCRIPTS
            ),
        ],
    )


__all__ = [
    "MIRA_V1_CORE_URL",
    "MIRA_V1_PERIPHERY_URL",
    "PERIPHERY_SCRIPTS",
    "mira_v1_layout",
]
