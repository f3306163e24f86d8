from crategraph import CrateGraph, CrateId, CfgOptions, Edition, Env, FileId

def add_crate(graph: CrateGraph, file_id: int, 
              display_name: 'str|None' = None, 
              edition: Edition = Edition.EDITION_2018, 
              cfg_options: 'CfgOptions|None' = None, 
              env: 'Env|None' = None) -> CrateId:
    return graph.add_crate_root(FileId(file_id), edition, display_name, 
                                cfg_options or CfgOptions(), CfgOptions(), env or Env())
