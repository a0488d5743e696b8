SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS Usuarios (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL,
    email TEXT UNIQUE NOT NULL,
    password TEXT NOT NULL,
    rol TEXT NOT NULL DEFAULT 'usuario' CHECK (rol IN ('admin', 'tecnico', 'usuario')),
    activo INTEGER NOT NULL DEFAULT 1,
    fecha_creacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    fecha_ultimo_acceso TIMESTAMP
);

CREATE TABLE IF NOT EXISTS Ubicaciones (
    id_ubicacion INTEGER PRIMARY KEY AUTOINCREMENT,
    nombre_ubicacion TEXT NOT NULL,
    departamento_responsable TEXT
);

CREATE TABLE IF NOT EXISTS Equipos (
    id_equipo INTEGER PRIMARY KEY AUTOINCREMENT,
    tipo TEXT,
    marca TEXT,
    modelo TEXT,
    sistema_operativo TEXT,
    placa_base TEXT,
    procesador TEXT,
    memoria_ram TEXT,
    disco_duro TEXT,
    tarjeta_grafica TEXT,
    sistema_refrigeracion TEXT,
    unidad_optica TEXT,
    tarjeta_sonido TEXT,
    tarjeta_red TEXT,
    teclado TEXT,
    raton TEXT,
    monitor TEXT,
    altavoces TEXT,
    cables_conectores TEXT,
    estado TEXT,
    id_ubicacion INTEGER NOT NULL,
    fecha_creacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    fecha_modificacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (id_ubicacion) REFERENCES Ubicaciones (id_ubicacion)
);

CREATE TABLE IF NOT EXISTS Hardware (
    id_hardware INTEGER PRIMARY KEY AUTOINCREMENT,
    tipo_componente TEXT,
    marca TEXT,
    modelo TEXT,
    especificaciones TEXT,
    estado TEXT,
    id_ubicacion INTEGER NOT NULL,
    fecha_creacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    fecha_modificacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (id_ubicacion) REFERENCES Ubicaciones (id_ubicacion)
);

CREATE TABLE IF NOT EXISTS Software (
    id_software INTEGER PRIMARY KEY AUTOINCREMENT,
    nombre TEXT NOT NULL,
    version TEXT,
    fecha_vencimiento DATE,
    detalles_licencia TEXT,
    fecha_creacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    fecha_modificacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS Incidencias (
    id_incidencia INTEGER PRIMARY KEY AUTOINCREMENT,
    descripcion_incidencia TEXT NOT NULL,
    fecha_reporte DATE,
    estado TEXT NOT NULL DEFAULT 'abierta',
    prioridad TEXT,
    id_equipo INTEGER,
    id_hardware INTEGER,
    id_usuario INTEGER NOT NULL,
    id_ubicacion INTEGER NOT NULL,
    fecha_creacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    fecha_modificacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    CHECK ((id_equipo IS NULL) <> (id_hardware IS NULL)),
    FOREIGN KEY (id_equipo) REFERENCES Equipos (id_equipo),
    FOREIGN KEY (id_hardware) REFERENCES Hardware (id_hardware),
    FOREIGN KEY (id_usuario) REFERENCES Usuarios (id),
    FOREIGN KEY (id_ubicacion) REFERENCES Ubicaciones (id_ubicacion)
);

CREATE TABLE IF NOT EXISTS Mantenimiento (
    id_mantenimiento INTEGER PRIMARY KEY AUTOINCREMENT,
    tipo TEXT NOT NULL,
    descripcion_mantenimiento TEXT,
    fecha_mantenimiento DATE,
    estado TEXT,
    id_equipo INTEGER,
    id_hardware INTEGER,
    id_usuario INTEGER NOT NULL,
    id_ubicacion INTEGER NOT NULL,
    fecha_creacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    fecha_modificacion TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    CHECK ((id_equipo IS NULL) <> (id_hardware IS NULL)),
    FOREIGN KEY (id_equipo) REFERENCES Equipos (id_equipo),
    FOREIGN KEY (id_hardware) REFERENCES Hardware (id_hardware),
    FOREIGN KEY (id_usuario) REFERENCES Usuarios (id),
    FOREIGN KEY (id_ubicacion) REFERENCES Ubicaciones (id_ubicacion)
);

CREATE INDEX IF NOT EXISTS idx_incidencias_equipo ON Incidencias (id_equipo);
CREATE INDEX IF NOT EXISTS idx_incidencias_hardware ON Incidencias (id_hardware);
CREATE INDEX IF NOT EXISTS idx_mantenimiento_equipo ON Mantenimiento (id_equipo);
CREATE INDEX IF NOT EXISTS idx_mantenimiento_hardware ON Mantenimiento (id_hardware);
"""
